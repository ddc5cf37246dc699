"""Tests for engine constraint parsing."""

import pytest

from versioning.requirement import (
    EmptyConstraint,
    InvalidConstraint,
    Requirement,
    parse_requirement,
)


class TestParseRequirement:
    """Grammar accepted by parse_requirement."""

    def test_range_clauses_keep_order(self):
        requirement = parse_requirement(">=6.0.0 <8.0.0", "npm")
        assert requirement.clauses == ((">=", "6.0.0"), ("<", "8.0.0"))
        assert requirement.constraints == [">= 6.0.0", "< 8.0.0"]

    def test_all_operators(self):
        requirement = parse_requirement("=1.0.0 >=1.0.0 <=2.0.0 >0.9.0 <3.0.0")
        assert [op for op, _ in requirement.clauses] == ["=", ">=", "<=", ">", "<"]

    def test_bare_version_is_equality(self):
        requirement = parse_requirement("7.5.0", "pnpm")
        assert requirement.constraints == ["= 7.5.0"]
        assert requirement.pinned_version == "7.5.0"

    def test_partial_version(self):
        assert parse_requirement("1").pinned_version == "1"

    def test_space_between_operator_and_version(self):
        assert parse_requirement(">= 6.0.0 < 8.0.0").constraints == [">= 6.0.0", "< 8.0.0"]

    def test_prerelease_and_build(self):
        requirement = parse_requirement(">=9.0.0-rc.1 <10.0.0+build.5")
        assert requirement.clauses == ((">=", "9.0.0-rc.1"), ("<", "10.0.0+build.5"))

    def test_surrounding_whitespace(self):
        assert parse_requirement("  =8.0.0  ").pinned_version == "8.0.0"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_input(self, raw):
        with pytest.raises(EmptyConstraint):
            parse_requirement(raw, "npm")

    @pytest.mark.parametrize("raw", [
        "invalid",
        "invalid-constraint",
        "^1.2.3",
        "~8",
        "1.x",
        ">=6.0.0 <8.0.0 junk",
        ">=6.0.0<8.0.0",
        "1.2.3 - 2.0.0",
        ">=",
        ">=7.0.0-a..b",
        "1.0.0-",
        "1.0.0+build.",
    ])
    def test_invalid_input(self, raw):
        with pytest.raises(InvalidConstraint) as exc_info:
            parse_requirement(raw, "npm")
        assert str(exc_info.value) == f"Unrecognized constraint format for npm: {raw}"
        assert exc_info.value.manager_name == "npm"

    def test_empty_is_an_invalid_constraint(self):
        assert issubclass(EmptyConstraint, InvalidConstraint)

    def test_classmethod_alias(self):
        assert Requirement.parse(">=1.0.0") == parse_requirement(">=1.0.0")


class TestRequirement:
    """Behavior of a parsed Requirement."""

    def test_pinned_only_for_single_equality(self):
        assert parse_requirement(">=7.0.0").pinned_version is None
        assert parse_requirement("=7.0.0 <8.0.0").pinned_version is None

    def test_str(self):
        assert str(parse_requirement(">=6.0.0 <8.0.0")) == ">= 6.0.0, < 8.0.0"

    def test_satisfied_by(self):
        requirement = parse_requirement(">=6.0.0 <8.0.0")
        assert requirement.is_satisfied_by("7.5.2")
        assert requirement.is_satisfied_by("6")
        assert not requirement.is_satisfied_by("8.0.0")
        assert not requirement.is_satisfied_by("5.9.9")

    def test_satisfied_by_partial_bounds(self):
        assert parse_requirement("<9").is_satisfied_by("8.19.2")

    def test_satisfied_by_unusable_version(self):
        requirement = parse_requirement(">=6.0.0")
        assert not requirement.is_satisfied_by(None)
        assert not requirement.is_satisfied_by("not-a-version")

    def test_unreadable_bound_is_not_satisfied(self):
        requirement = Requirement(clauses=((">=", "7.0.0-a..b"),))
        assert not requirement.is_satisfied_by("8.0.0")
