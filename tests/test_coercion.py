"""Tests for argument devirtualisation, coercion and zero values."""
from collections import OrderedDict, namedtuple
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Optional, Union

import pytest
from pydantic import BaseModel, ConfigDict


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Level(int):
    pass


class Coord(BaseModel):
    x: int = 0
    y: int = 0


@dataclass
class Span:
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class FrozenSpan:
    start: int = 0


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)
    x: int = 0


Pair = namedtuple("Pair", "left right")


class TestDevirt:
    def test_tuples_keep_their_type(self):
        from tstruct.coercion import devirt

        pair = (1, 2)
        assert devirt(pair) is pair
        assert devirt(range(2)) == range(2)

    def test_mappings_become_dict(self):
        from tstruct.coercion import devirt

        proxy = MappingProxyType({"a": 1})
        assert type(devirt(proxy)) is dict
        assert devirt(proxy) == {"a": 1}
        assert type(devirt(OrderedDict(a=1))) is OrderedDict

    def test_strings_and_named_tuples_untouched(self):
        from tstruct.coercion import devirt

        pair = Pair(1, 2)
        assert devirt("abc") == "abc"
        assert devirt(b"abc") == b"abc"
        assert devirt(pair) is pair

    def test_builtin_containers_returned_as_is(self):
        from tstruct.coercion import devirt

        items = [1]
        mapping = {"a": 1}
        assert devirt(items) is items
        assert devirt(mapping) is mapping


class TestMatches:
    @pytest.mark.parametrize(
        "value,annotation,expected",
        [
            (1, int, True),
            (True, int, False),
            (1, float, True),
            (1.5, int, False),
            ("a", Any, True),
            ([1], list[int], True),
            ({"a": 1}, dict[str, int], True),
            (None, Optional[int], True),
            ("red", Literal["red", "blue"], True),
            (Coord(), Coord, True),
            ({"x": 1}, Coord, False),
        ],
    )
    def test_shallow_match(self, value, annotation, expected):
        from tstruct.coercion import matches

        assert matches(value, annotation) is expected


class TestZeroValue:
    @pytest.mark.parametrize(
        "annotation,expected",
        [
            (int, 0),
            (float, 0.0),
            (str, ""),
            (bool, False),
            (bytes, b""),
            (list[int], []),
            (dict[str, int], {}),
            (tuple[int, ...], ()),
            (set[str], set()),
            (Optional[int], None),
            (Any, None),
            (Literal["a", "b"], "a"),
            (Union[int, str], 0),
        ],
    )
    def test_builtin_zeros(self, annotation, expected):
        from tstruct.coercion import zero_value

        assert zero_value(annotation) == expected

    def test_record_zero_is_blank_instance(self):
        from tstruct.coercion import zero_value

        assert zero_value(Coord) == Coord()
        assert zero_value(Span) == Span()

    def test_enum_zero_is_first_member(self):
        from tstruct.coercion import zero_value

        assert zero_value(Color) is Color.RED

    def test_primitive_subclass_zero(self):
        from tstruct.coercion import zero_value

        zero = zero_value(Level)
        assert zero == 0
        assert type(zero) is Level

    def test_fresh_container_each_time(self):
        from tstruct.coercion import zero_value

        assert zero_value(list[int]) is not zero_value(list[int])


class TestCoerce:
    def test_int_to_float(self):
        from tstruct.coercion import coerce

        result = coerce(3, float)
        assert result == 3.0
        assert type(result) is float

    def test_integral_float_to_int(self):
        from tstruct.coercion import coerce

        assert coerce(2.0, int) == 2

    def test_fractional_float_to_int_rejected(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError):
            coerce(2.5, int)

    def test_bool_is_not_an_int(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError):
            coerce(True, int)

    def test_bool_accepts_only_bools(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        assert coerce(True, bool) is True
        assert coerce(False, bool) is False
        for value in ("yes", "true", "1", 1, 0):
            with pytest.raises(CoercionError):
                coerce(value, bool)

    def test_named_int(self):
        from tstruct.coercion import coerce

        result = coerce(5, Level)
        assert type(result) is Level
        assert result == 5

    def test_enum_by_value(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        assert coerce("blue", Color) is Color.BLUE
        with pytest.raises(CoercionError):
            coerce("green", Color)

    def test_str_rejects_numbers(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError):
            coerce(1, str)

    def test_none_needs_optional(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        assert coerce(None, Optional[int]) is None
        with pytest.raises(CoercionError):
            coerce(None, int)

    def test_union_prefers_matching_option(self):
        from tstruct.coercion import coerce

        assert coerce("1", Union[int, str]) == "1"
        assert coerce(1, Union[str, int]) == 1

    def test_literal(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        assert coerce("a", Literal["a", "b"]) == "a"
        with pytest.raises(CoercionError):
            coerce("c", Literal["a", "b"])
        with pytest.raises(CoercionError):
            coerce(True, Literal[1])

    def test_nested_containers(self):
        from tstruct.coercion import coerce

        value = MappingProxyType({"a": (1, 2), "b": [3.0]})
        assert coerce(value, dict[str, list[int]]) == {"a": [1, 2], "b": [3]}

    def test_fixed_tuple(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        assert coerce([1, "a"], tuple[int, str]) == (1, "a")
        with pytest.raises(CoercionError):
            coerce([1], tuple[int, str])

    def test_set_and_frozenset(self):
        from tstruct.coercion import coerce

        assert coerce([1, 1, 2], set[int]) == {1, 2}
        assert coerce((1,), frozenset[int]) == frozenset({1})

    def test_record_from_mapping(self):
        from tstruct.coercion import coerce

        assert coerce({"x": 1, "y": 2}, Coord) == Coord(x=1, y=2)
        assert coerce({"start": 1}, Span) == Span(start=1)

    def test_record_from_bad_mapping(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError):
            coerce({"x": "nope"}, Coord)
        with pytest.raises(CoercionError):
            coerce({"unknown": 1}, Span)

    def test_record_instances_copied(self):
        from tstruct.coercion import coerce

        span = Span(1, 2)
        copied = coerce(span, Span)
        assert copied == span
        assert copied is not span
        assert coerce(span, Span, copy_records=False) is span

    def test_record_of_wrong_type(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError, match="expected Span"):
            coerce(Coord(), Span)

    def test_any_passes_through(self):
        from tstruct.coercion import coerce

        marker = object()
        assert coerce(marker, Any) is marker
        pair = (1, 2)
        assert coerce(pair, Any) is pair

    def test_any_copies_records(self):
        from tstruct.coercion import coerce

        span = Span(1, 2)
        copied = coerce(span, Any)
        assert copied == span
        assert copied is not span
        assert coerce(span, object, copy_records=False) is span

    def test_tuple_into_list_field(self):
        from tstruct.coercion import coerce

        assert coerce((1, 2), list[int]) == [1, 2]
        assert coerce(range(3), tuple[int, ...]) == (0, 1, 2)

    def test_string_is_not_a_sequence_of_items(self):
        from tstruct import CoercionError
        from tstruct.coercion import coerce

        with pytest.raises(CoercionError):
            coerce("ab", list[str])

    def test_coercion_error_is_a_type_error(self):
        from tstruct import CallError, CoercionError

        assert issubclass(CoercionError, CallError)
        assert issubclass(CoercionError, TypeError)


class TestIsFrozen:
    @pytest.mark.parametrize(
        "annotation,expected",
        [
            (str, True),
            (Level, True),
            (tuple, True),
            (FrozenSpan, True),
            (FrozenModel, True),
            (Span, False),
            (Coord, False),
            (list, False),
        ],
    )
    def test_is_frozen(self, annotation, expected):
        from tstruct.coercion import is_frozen

        assert is_frozen(annotation) is expected
