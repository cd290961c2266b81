"""Unit tests for the display codec builder.

Tests cover:
- Per-primitive wire <-> display rules
- Record / variant / vector scenarios and nested round trips
- Optional and byte-sequence boundaries
- Shape mismatch paths
"""

import pytest

from candidkit.codecs.builder import DisplayCodecBuilder, did_to_display_codec, did_to_display_codecs
from candidkit.core.exceptions import ConstructionError, ShapeMismatchError
from candidkit.core.principal import Principal
from candidkit.idl import builders as IDL
from candidkit.models.options import DisplayOptions


def _tree():
    tree = IDL.Rec("Tree")
    tree.fill(IDL.Variant({"Leaf": IDL.Nat, "Node": IDL.Vec(tree)}))
    return tree


def test_record_of_text_and_nat_round_trips_exactly():
    codec = did_to_display_codec(IDL.Record({"name": IDL.Text, "age": IDL.Nat}))
    wire = {"name": "Alice", "age": 30}

    display = codec.as_display(wire)
    assert display == {"name": "Alice", "age": "30"}

    back = codec.as_candid(display)
    assert back == wire
    assert isinstance(back["age"], int)


def test_variant_null_and_text_options():
    codec = did_to_display_codec(IDL.Variant({"Active": IDL.Null, "Suspended": IDL.Text}))

    assert codec.as_display({"Active": None}) == {"_type": "Active"}
    assert codec.as_display({"Suspended": "abuse"}) == {"_type": "Suspended", "Suspended": "abuse"}

    assert codec.as_candid({"_type": "Active"}) == {"Active": None}
    assert codec.as_candid({"_type": "Suspended", "Suspended": "abuse"}) == {"Suspended": "abuse"}


def test_vector_of_nat():
    codec = did_to_display_codec(IDL.Vec(IDL.Nat))

    assert codec.as_display([1, 2, 3]) == ["1", "2", "3"]
    assert codec.as_candid(["1", "2", "3"]) == [1, 2, 3]
    assert codec.as_display([]) == []


@pytest.mark.parametrize("node", [IDL.Nat, IDL.Int, IDL.Nat64, IDL.Int64])
def test_big_integers_keep_precision_above_float_range(node):
    codec = did_to_display_codec(node)
    value = 2**53 + 1

    assert codec.as_display(value) == "9007199254740993"
    assert codec.as_candid("9007199254740993") == value


def test_int_accepts_negative_text():
    codec = did_to_display_codec(IDL.Int)
    assert codec.as_display(-5) == "-5"
    assert codec.as_candid("-5") == -5


def test_nat64_out_of_range_is_rejected():
    codec = did_to_display_codec(IDL.Nat64)
    with pytest.raises(ShapeMismatchError, match="out of range"):
        codec.as_candid(str(2**64))


def test_nat_rejects_decimal_text():
    codec = did_to_display_codec(IDL.Nat)
    with pytest.raises(ShapeMismatchError, match="expected nat"):
        codec.as_candid("12.5")


def test_nat_rejects_bool():
    codec = did_to_display_codec(IDL.Nat)
    with pytest.raises(ShapeMismatchError):
        codec.as_candid(True)


@pytest.mark.parametrize(
    "node,value",
    [
        (IDL.Nat8, 255),
        (IDL.Nat16, 65535),
        (IDL.Nat32, 7),
        (IDL.Int8, -128),
        (IDL.Int32, -1),
        (IDL.Float32, 1.5),
        (IDL.Float64, -0.25),
        (IDL.Bool, True),
        (IDL.Text, "hello"),
        (IDL.Null, None),
        (IDL.Reserved, None),
    ],
)
def test_fixed_width_and_simple_primitives_are_identity(node, value):
    codec = did_to_display_codec(node)
    assert codec.as_display(value) == value
    assert codec.as_candid(value) == value


def test_principal_to_text_and_back():
    codec = did_to_display_codec(IDL.Principal)
    principal = Principal.from_text("ryjl3-tyaaa-aaaaa-aaaba-cai")

    assert codec.as_display(principal) == "ryjl3-tyaaa-aaaaa-aaaba-cai"
    assert codec.as_candid("ryjl3-tyaaa-aaaaa-aaaba-cai") == principal


def test_principal_decoding_passes_native_object_through():
    codec = did_to_display_codec(IDL.Principal)
    principal = Principal.management_canister()

    assert codec.as_candid(principal) is principal
    assert codec.as_candid(codec.as_candid(principal)) is principal


def test_invalid_principal_text_is_a_mismatch():
    codec = did_to_display_codec(IDL.Principal)
    with pytest.raises(ShapeMismatchError, match="principal"):
        codec.as_candid("not-a-principal")


def test_blob_of_96_bytes_is_hex():
    codec = did_to_display_codec(IDL.Blob())
    data = bytes(range(96))

    display = codec.as_display(data)
    assert display == "0x" + data.hex()
    assert codec.as_candid(display) == data


def test_blob_of_97_bytes_stays_raw():
    codec = did_to_display_codec(IDL.Blob())
    data = bytes(range(97))

    display = codec.as_display(data)
    assert display == data
    assert codec.as_candid(display) == data


def test_blob_decoding_accepts_hex_without_prefix_and_byte_lists():
    codec = did_to_display_codec(IDL.Blob())
    assert codec.as_candid("0102") == b"\x01\x02"
    assert codec.as_candid([1, 2]) == b"\x01\x02"


def test_blob_threshold_and_prefix_come_from_options():
    codec = did_to_display_codec(IDL.Blob(), DisplayOptions(blob_hex_threshold=2, hex_prefix=False))
    assert codec.as_display(b"\x01\x02") == "0102"
    assert codec.as_display(b"\x01\x02\x03") == b"\x01\x02\x03"


def test_invalid_hex_is_a_mismatch():
    codec = did_to_display_codec(IDL.Blob())
    with pytest.raises(ShapeMismatchError, match="blob"):
        codec.as_candid("0xzz")


class TestOptionalBoundary:
    """Optional values: [] <-> None and [v] <-> v."""

    def test_absent(self):
        codec = did_to_display_codec(IDL.Opt(IDL.Nat))
        assert codec.as_display([]) is None
        assert codec.as_candid(None) == []

    def test_present(self):
        codec = did_to_display_codec(IDL.Opt(IDL.Nat))
        assert codec.as_display([5]) == "5"
        assert codec.as_candid("5") == [5]

    def test_more_than_one_element_is_rejected(self):
        codec = did_to_display_codec(IDL.Opt(IDL.Nat))
        with pytest.raises(ShapeMismatchError, match=r"\[\] or \[value\]"):
            codec.as_display([1, 2])

    @pytest.mark.parametrize(
        "inner,present",
        [(IDL.Null, [None]), (IDL.Reserved, [None]), (IDL.Opt(IDL.Nat), [[]])],
    )
    def test_none_inside_an_optional_decodes_as_absent(self, inner, present):
        codec = did_to_display_codec(IDL.Opt(inner))

        assert codec.as_display(present) is None
        assert codec.as_display([]) is None
        assert codec.as_candid(None) == []

    def test_missing_optional_record_key_decodes_as_absent(self):
        codec = did_to_display_codec(IDL.Record({"name": IDL.Text, "nick": IDL.Opt(IDL.Text)}))
        assert codec.as_candid({"name": "x"}) == {"name": "x", "nick": []}
        assert codec.as_display({"name": "x"}) == {"name": "x", "nick": None}


def test_nested_composites_round_trip():
    account = IDL.Record(
        {
            "owner": IDL.Principal,
            "subaccount": IDL.Opt(IDL.Blob()),
            "tags": IDL.Vec(IDL.Tuple(IDL.Text, IDL.Nat64)),
            "status": IDL.Variant({"Open": IDL.Null, "Frozen": IDL.Record({"until": IDL.Nat64})}),
        }
    )
    codec = did_to_display_codec(account)
    wire = {
        "owner": Principal.anonymous(),
        "subaccount": [b"\x01" * 32],
        "tags": [("a", 1), ("b", 2**63)],
        "status": {"Frozen": {"until": 1700000000000000000}},
    }

    display = codec.as_display(wire)
    assert display == {
        "owner": "2vxsx-fae",
        "subaccount": "0x" + "01" * 32,
        "tags": [["a", "1"], ["b", "9223372036854775808"]],
        "status": {"_type": "Frozen", "Frozen": {"until": "1700000000000000000"}},
    }
    assert codec.as_candid(display) == wire
    assert codec.as_display(codec.as_candid(display)) == display


def test_recursive_codec_round_trips():
    codec = did_to_display_codec(_tree())
    wire = {"Node": [{"Leaf": 1}, {"Node": [{"Leaf": 2}]}]}

    display = codec.as_display(wire)
    assert display == {
        "_type": "Node",
        "Node": [
            {"_type": "Leaf", "Leaf": "1"},
            {"_type": "Node", "Node": [{"_type": "Leaf", "Leaf": "2"}]},
        ],
    }
    assert codec.as_candid(display) == wire


def test_unfilled_recursive_type_fails_at_build_time():
    with pytest.raises(ConstructionError, match="never filled"):
        DisplayCodecBuilder().build(IDL.Rec("Dangling"))


def test_function_reference():
    codec = did_to_display_codec(IDL.Func([IDL.Text], [IDL.Text], ["query"]))
    wire = (Principal.management_canister(), "greet")

    assert codec.as_display(wire) == ["aaaaa-aa", "greet"]
    assert codec.as_candid(["aaaaa-aa", "greet"]) == wire


def test_unknown_shape_is_identity():
    codec = did_to_display_codec(IDL.Unknown("future_type"))
    value = {"anything": [1, 2]}
    assert codec.as_display(value) is value
    assert codec.as_candid(value) is value


def test_mismatch_reports_the_nested_path():
    codec = did_to_display_codec(IDL.Record({"items": IDL.Vec(IDL.Nat)}))

    with pytest.raises(ShapeMismatchError) as exc_info:
        codec.as_candid({"items": ["1", "x"]})

    assert exc_info.value.path == "items[1]"
    assert exc_info.value.expected == "nat"
    assert exc_info.value.actual == "text"


def test_missing_required_key_is_a_mismatch():
    codec = did_to_display_codec(IDL.Record({"name": IDL.Text}))
    with pytest.raises(ShapeMismatchError, match="missing field"):
        codec.as_candid({})


def test_variant_decoding_requires_discriminator():
    codec = did_to_display_codec(IDL.Variant({"A": IDL.Nat}))
    with pytest.raises(ShapeMismatchError, match="_type"):
        codec.as_candid({"A": "1"})


def test_variant_unknown_tag_is_a_mismatch():
    codec = did_to_display_codec(IDL.Variant({"A": IDL.Nat}))
    with pytest.raises(ShapeMismatchError, match="unknown tag"):
        codec.as_display({"B": 1})


def test_did_to_display_codecs_builds_a_mapping():
    codecs = did_to_display_codecs({"balance": IDL.Nat, "name": IDL.Text})
    assert codecs["balance"].as_display(1) == "1"
    assert codecs["name"].as_display("x") == "x"
