"""Tests for switchyard.validation — operator rules and the rule() factory."""

import pytest

from switchyard.errors import ConfigurationError
from switchyard.validation import (
    OPERATORS,
    eq,
    gt,
    gte,
    lt,
    lte,
    matches,
    max_length,
    min_length,
    neq,
    none_of,
    one_of,
    required,
    rule,
)

# ---------------------------------------------------------------------------
# Individual rule tests
# ---------------------------------------------------------------------------


class TestRequired:
    def test_none(self) -> None:
        assert required(None) is not None

    def test_whitespace_only(self) -> None:
        assert required("   ") is not None

    def test_zero_is_present(self) -> None:
        assert required(0) is None

    def test_valid(self) -> None:
        assert required("hello") is None


class TestComparison:
    def test_eq(self) -> None:
        assert eq(3)(3) is None
        assert eq(3)(4) == "Must equal 3"

    def test_neq(self) -> None:
        assert neq("admin")("guest") is None
        assert neq("admin")("admin") is not None

    def test_gt(self) -> None:
        assert gt(0)(1) is None
        assert gt(0)(0) == "Must be greater than 0"

    def test_gte(self) -> None:
        assert gte(0)(0) is None
        assert gte(0)(-1) == "Must be at least 0"

    def test_lt(self) -> None:
        assert lt(10)(9) is None
        assert lt(10)(10) is not None

    def test_lte(self) -> None:
        assert lte(10)(10) is None
        assert lte(10)(11) == "Must be at most 10"


class TestLength:
    def test_max_length(self) -> None:
        assert max_length(5)("hello") is None
        assert max_length(5)("hello!") is not None

    def test_min_length(self) -> None:
        assert min_length(2)(["a", "b"]) is None
        assert min_length(2)(["a"]) is not None


class TestChoice:
    def test_one_of(self) -> None:
        assert one_of(["json", "html"])("json") is None
        assert one_of(["json", "html"])("xml") == "Must be one of: json, html"

    def test_none_of(self) -> None:
        assert none_of([0])(1) is None
        assert none_of([0])(0) is not None

    def test_matches(self) -> None:
        assert matches(r"^[a-z-]+$")("hello-world") is None
        assert matches(r"^[a-z-]+$")("Hello") is not None

    def test_matches_custom_message(self) -> None:
        assert matches(r"^\d+$", "Digits only")("x") == "Digits only"


class TestRule:
    def test_required_operator(self) -> None:
        assert rule("required") is required

    @pytest.mark.parametrize("operator", sorted(OPERATORS))
    def test_every_operator_builds(self, operator: str) -> None:
        expected = {"in": ["a"], "nin": ["a"], "match": "a", "min": 1, "max": 1}.get(operator, 1)
        assert callable(rule(operator, expected))

    def test_gte_operator(self) -> None:
        check = rule("gte", 10)
        assert check(10) is None
        assert check(9) is not None

    def test_unknown_operator(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            rule("between", (1, 2))
        assert "between" in str(exc_info.value)
        assert "gte" in str(exc_info.value)
