"""Unit tests for the field metadata visitor.

Tests cover:
- Defaults, paths and labels per shape
- Defaults satisfying their own schema
- Variant discriminator integrity
- Lazy vector items and recursive expansion
- Idempotent re-visit
"""

import pytest

from candidkit.core.exceptions import ConstructionError, UnknownOptionError
from candidkit.core.labels import format_label
from candidkit.fields.types import RecursiveField, VariantField
from candidkit.fields.visitor import FieldMetadataVisitor
from candidkit.idl import builders as IDL


def _tree():
    tree = IDL.Rec("Tree")
    tree.fill(IDL.Variant({"Leaf": IDL.Nat, "Node": IDL.Vec(tree)}))
    return tree


def _build(node, **kwargs):
    return FieldMetadataVisitor().build(node, **kwargs)


ALL_SHAPES = [
    IDL.Text,
    IDL.Nat,
    IDL.Int8,
    IDL.Nat64,
    IDL.Float64,
    IDL.Bool,
    IDL.Null,
    IDL.Principal,
    IDL.Reserved,
    IDL.Blob(),
    IDL.Vec(IDL.Nat),
    IDL.Opt(IDL.Text),
    IDL.Tuple(IDL.Text, IDL.Nat),
    IDL.Record({"to": IDL.Principal, "amount": IDL.Nat, "memo": IDL.Opt(IDL.Blob())}),
    IDL.Variant({"Active": IDL.Null, "Suspended": IDL.Text}),
    IDL.Variant({"Transfer": IDL.Record({"to": IDL.Principal}), "Burn": IDL.Nat}),
    IDL.Func([IDL.Text], [IDL.Text], ["query"]),
    IDL.Service({}),
    IDL.Unknown("future_type"),
    _tree(),
]


@pytest.mark.parametrize("node", ALL_SHAPES, ids=lambda n: n.name)
def test_default_satisfies_schema(node):
    field = _build(node)
    assert field.validate(field.get_default()), field.errors(field.get_default())


def test_record_defaults_and_paths():
    field = _build(IDL.Record({"to": IDL.Principal, "amount": IDL.Nat}), label="__arg0", path="[0]")

    assert field.kind == "record"
    assert field.default == {"to": "", "amount": ""}
    assert [f.path for f in field.fields] == ["[0].to", "[0].amount"]
    assert field.get_field("amount").component == "number-input"
    assert field.display_label == "Arg 0"


def test_root_record_children_use_bare_keys():
    field = _build(IDL.Record({"created_at": IDL.Nat64}))
    child = field.get_field("created_at")

    assert child.path == "created_at"
    assert child.display_label == "Created At"


def test_tuple_children_are_positional():
    field = _build(IDL.Tuple(IDL.Text, IDL.Nat))

    second = field.fields[1]
    assert second.path == "[1]"
    assert second.label == "_1_"
    assert second.display_label == "Item 1"
    assert field.default == ["", ""]


def test_optional_inner_keeps_parent_path():
    field = _build(IDL.Record({"nick": IDL.Opt(IDL.Text)}))
    nick = field.get_field("nick")

    assert nick.default is None
    assert nick.inner.path == "nick"
    assert nick.inner.label == "nick"
    assert nick.get_inner_default() == ""
    assert nick.is_enabled("x") and not nick.is_enabled(None)


def test_number_field_bounds():
    nat8 = _build(IDL.Nat8)
    assert (nat8.min, nat8.max) == ("0", "255")
    assert nat8.validate("255")
    assert not nat8.validate("256")

    nat = _build(IDL.Nat)
    assert nat.min == "0" and nat.max is None
    assert nat.validate("123456789012345678901234567890")
    assert not nat.validate("-1")
    assert not nat.validate("abc")
    assert not nat.validate(5)

    int8 = _build(IDL.Int8)
    assert int8.validate("-128")
    assert not int8.validate("-129")


def test_float_field_accepts_decimal_text():
    field = _build(IDL.Float32)
    assert field.is_float
    assert field.placeholder == "0.0"
    assert field.validate("1.5")
    assert not field.validate("one")


def test_principal_field_validation():
    field = _build(IDL.Principal)
    assert field.validate("aaaaa-aa")
    assert field.validate("")
    assert not field.validate("bad principal")


def test_blob_field():
    field = _build(IDL.Blob())
    assert field.kind == "blob"
    assert field.component == "blob-upload"
    assert field.validate("0x0102")
    assert field.validate(b"\x01")
    assert not field.validate("0x012")
    assert field.accepted_formats == ("hex", "file")
    assert not field.validate("AQI=")


def test_function_field():
    field = _build(IDL.Func([], [], ["query"]))
    assert field.kind == "function"
    assert field.function_kind == "query"
    assert field.default == ["", ""]


def test_reserved_and_unknown_become_fallback_fields():
    assert _build(IDL.Reserved).kind == "unknown"
    field = _build(IDL.Unknown("future_type"))
    assert field.component == "unknown-fallback"
    assert field.candid_type == "future_type"


class TestVariantFields:
    """Variant defaults, option lookup and the _type discriminator."""

    def _field(self) -> VariantField:
        return _build(
            IDL.Variant(
                {
                    "Active": IDL.Null,
                    "Suspended": IDL.Text,
                    "Limited": IDL.Opt(IDL.Nat),
                    "Transfer": IDL.Record({"to": IDL.Principal}),
                }
            )
        )

    def test_default_selects_first_option(self):
        field = self._field()
        assert field.default == {"_type": "Active"}
        assert field.default_option == "Active"
        assert field.option_keys == ("Active", "Suspended", "Limited", "Transfer")

    def test_selected_key_round_trips_for_every_option(self):
        field = self._field()
        for tag in field.option_keys:
            default = field.get_option_default(tag)
            assert field.get_selected_key(default) == tag
            assert field.validate(default)

    def test_option_defaults(self):
        field = self._field()
        assert field.get_option_default("Suspended") == {"_type": "Suspended", "Suspended": ""}
        assert field.get_option_default("Transfer") == {"_type": "Transfer", "Transfer": {"to": ""}}

    def test_discriminator_rejects_mismatched_payload(self):
        field = self._field()
        assert not field.validate({"_type": "Transfer", "Transfer": "oops"})
        assert not field.validate({"_type": "Missing"})

    def test_unknown_option_raises(self):
        field = self._field()
        with pytest.raises(UnknownOptionError, match="Unknown variant option"):
            field.get_option("Missing")
        with pytest.raises(KeyError):
            field.get_option("Missing")

    def test_option_paths(self):
        field = _build(IDL.Record({"status": IDL.Variant({"Ok": IDL.Nat, "Err": IDL.Text})}))
        status = field.get_field("status")
        assert status.get_option("Err").path == "status.Err"


def test_empty_variant_is_a_construction_error():
    with pytest.raises(ConstructionError, match="no options"):
        IDL.Variant({})


def test_vector_items_are_created_on_demand():
    field = _build(IDL.Record({"tags": IDL.Vec(IDL.Text)}))
    tags = field.get_field("tags")

    assert tags.default == []
    assert tags.item_field.path == "tags[0]"
    assert tags.item_field.label == "tags_item"

    third = tags.create_item_field(3)
    assert third.path == "tags[3]"
    assert third.label == "tags_item"
    assert format_label(third.label) == format_label(tags.item_field.label) == "Item"
    assert tags.create_item_field(4, label="extra").label == "extra"
    assert tags.get_item_default() == ""
    assert tags.validate(["a", "b"])


class TestRecursiveFields:
    """Recursive types expand one level per extract() call."""

    def test_extract_is_lazy_and_memoized(self):
        field = _build(_tree())

        assert isinstance(field, RecursiveField)
        assert not field.is_expanded
        assert field.default is None

        inner = field.extract()
        assert field.is_expanded
        assert inner.kind == "variant"
        assert field.extract() is inner

    def test_nested_occurrence_stays_unexpanded(self):
        inner = _build(_tree()).extract()
        nested = inner.get_option("Node").item_field

        assert isinstance(nested, RecursiveField)
        assert not nested.is_expanded
        assert nested.recursion_depth == 1
        assert nested.path == "Node[0]"

    def test_separate_builds_do_not_share_expansion(self):
        tree = _tree()
        first = _build(tree)
        second = _build(tree)

        first.extract()
        assert not second.is_expanded

    def test_recursive_schema_validates_through_expansion(self):
        field = _build(_tree())
        assert field.validate({"_type": "Node", "Node": [{"_type": "Leaf", "Leaf": "1"}]})
        assert not field.validate({"_type": "Leaf", "Leaf": "x"})

    def test_unfilled_recursive_type_is_a_construction_error(self):
        with pytest.raises(ConstructionError, match="never filled"):
            _build(IDL.Rec("Dangling"))


def test_revisit_yields_equal_trees():
    node = IDL.Record(
        {
            "owner": IDL.Principal,
            "tags": IDL.Vec(IDL.Tuple(IDL.Text, IDL.Nat)),
            "tree": _tree(),
            "status": IDL.Variant({"Open": IDL.Null, "Closed": IDL.Opt(IDL.Nat64)}),
        }
    )
    visitor = FieldMetadataVisitor()
    assert visitor.build(node) == visitor.build(node)
    assert FieldMetadataVisitor().build(node) == FieldMetadataVisitor().build(node)
