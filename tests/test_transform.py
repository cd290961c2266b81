import pytest

from candidkit.codecs.builder import did_to_display_codec
from candidkit.codecs.transform import build_method_codecs, transform_args, transform_result, type_from_array
from candidkit.core.exceptions import ShapeMismatchError
from candidkit.idl import builders as IDL
from candidkit.idl.types import TupleType


def test_type_from_array_shapes():
    assert type_from_array([]) == IDL.Null
    assert type_from_array([IDL.Nat]) == IDL.Nat

    combined = type_from_array([IDL.Text, IDL.Nat])
    assert isinstance(combined, TupleType)
    assert combined.components == (IDL.Text, IDL.Nat)


def test_transform_args_single_argument():
    codec = did_to_display_codec(IDL.Nat)
    assert transform_args(codec, ["5"]) == [5]


def test_transform_args_multiple_arguments():
    codec = did_to_display_codec(type_from_array([IDL.Text, IDL.Nat]))
    assert transform_args(codec, ["a", "5"]) == ["a", 5]


def test_transform_args_empty():
    codec = did_to_display_codec(IDL.Null)
    assert transform_args(codec, []) == []
    assert transform_args(codec, None) == []


def test_transform_args_propagates_mismatch():
    codec = did_to_display_codec(IDL.Nat)
    with pytest.raises(ShapeMismatchError):
        transform_args(codec, ["not a number"])


def test_transform_result_keeps_none():
    codec = did_to_display_codec(IDL.Nat)
    assert transform_result(codec, None) is None
    assert transform_result(codec, 7) == "7"


def test_method_codecs_encode_and_decode():
    func = IDL.Func([IDL.Principal, IDL.Nat], [IDL.Opt(IDL.Text)], ["query"])
    codecs = build_method_codecs(func, "lookup")

    args = codecs.encode_args(["aaaaa-aa", "10"])
    assert args[0].to_text() == "aaaaa-aa"
    assert args[1] == 10

    assert codecs.decode_result(["hi"]) == "hi"
    assert codecs.decode_result([]) is None
    assert codecs.function_name == "lookup"
