import pytest

from candidkit.core.exceptions import ConstructionError
from candidkit.idl import builders as IDL
from candidkit.idl.types import PrimitiveKind, PrimitiveType, Shape, is_null_type, unwrap_recursive


def test_primitive_properties():
    assert IDL.Nat.is_big_integer and IDL.Nat.is_unsigned
    assert IDL.Int64.is_big_integer and not IDL.Int64.is_unsigned
    assert not IDL.Nat32.is_big_integer
    assert IDL.Float32.is_float and IDL.Float32.is_number and not IDL.Float32.is_integer
    assert IDL.Int16.int_range() == (-32768, 32767)
    assert IDL.Nat.int_range() == (0, None)
    assert IDL.Int.int_range() == (None, None)
    assert IDL.Text.int_range() == (None, None)


def test_names():
    assert IDL.Blob().name == "blob"
    assert IDL.Vec(IDL.Text).name == "vec text"
    assert IDL.Opt(IDL.Nat64).name == "opt nat64"
    assert IDL.Record({"a": IDL.Nat}).name == "record {a: nat}"
    assert IDL.Variant({"A": IDL.Null, "B": IDL.Text}).name == "variant {A; B: text}"
    assert IDL.Func([IDL.Text], [IDL.Nat], ["query"]).name == "func (text) -> (nat) query"


def test_shapes():
    assert IDL.Text.shape is Shape.PRIMITIVE
    assert IDL.Tuple(IDL.Text).shape is Shape.TUPLE
    assert IDL.Rec().shape is Shape.RECURSIVE
    assert IDL.Service({}).shape is Shape.SERVICE
    assert IDL.Unknown().shape is Shape.UNKNOWN


def test_nodes_are_value_equal():
    assert IDL.Record({"a": IDL.Nat}) == IDL.Record({"a": IDL.Nat})
    assert PrimitiveType(PrimitiveKind.NAT) == IDL.Nat
    assert is_null_type(IDL.Null)
    assert not is_null_type(IDL.Reserved)


def test_duplicate_record_keys_are_rejected():
    with pytest.raises(ConstructionError, match="duplicate field keys"):
        IDL.Record([("a", IDL.Nat), ("a", IDL.Text)])


def test_duplicate_variant_tags_are_rejected():
    with pytest.raises(ConstructionError, match="duplicate tags"):
        IDL.Variant([("A", IDL.Null), ("A", IDL.Text)])


class TestRecursiveType:
    """Fill-once indirection for self-referential types."""

    def test_fill_and_resolve(self):
        tree = IDL.Rec("Tree")
        assert not tree.is_filled

        body = IDL.Variant({"Leaf": IDL.Nat, "Node": IDL.Vec(tree)})
        tree.fill(body)
        assert tree.is_filled
        assert tree.resolve() is body
        assert unwrap_recursive(tree) is body

    def test_fill_twice_is_rejected(self):
        tree = IDL.Rec("Tree").fill(IDL.Nat)
        with pytest.raises(ConstructionError, match="already filled"):
            tree.fill(IDL.Text)

    def test_fill_with_itself_is_rejected(self):
        tree = IDL.Rec("Tree")
        with pytest.raises(ConstructionError, match="cannot point at itself"):
            tree.fill(tree)

    def test_resolve_unfilled(self):
        with pytest.raises(ConstructionError, match="never filled"):
            IDL.Rec("Tree").resolve()

    def test_cycle_of_indirections_is_rejected(self):
        a = IDL.Rec("A")
        b = IDL.Rec("B")
        a.fill(b)
        b.fill(a)
        with pytest.raises(ConstructionError, match="resolves to itself"):
            unwrap_recursive(a)

    def test_identity_hashing(self):
        assert IDL.Rec("Tree") != IDL.Rec("Tree")
        tree = IDL.Rec("Tree")
        assert {tree: 1}[tree] == 1


def test_service_method_lookup():
    greet = IDL.Func([IDL.Text], [IDL.Text])
    service = IDL.Service({"greet": greet})

    assert service.method("greet") is greet
    with pytest.raises(KeyError):
        service.method("missing")
