"""Engine constraint parsing into structured requirements.

A constraint is a whitespace separated list of clauses, each an optional
comparison operator followed by a version:

    ">=6.0.0 <8.0.0"   -> [(">=", "6.0.0"), ("<", "8.0.0")]
    ">= 6.0.0 < 8.0.0" -> same as above
    "7.5.0"            -> [("=", "7.5.0")]

Anything else (npm ranges such as ``^1.2.3``, ``1.x``, hyphen ranges) is
rejected as a whole.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import semantic_version

OPERATORS = ("=", ">=", "<=", ">", "<")

# Pre-release and build parts are dot separated, non-empty identifiers
_IDENTIFIERS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

VERSION_PATTERN = r"\d+(?:\.\d+){0,2}(?:-" + _IDENTIFIERS + r")?(?:\+" + _IDENTIFIERS + r")?"

_CLAUSE_RE = re.compile(
    r"\s*(?P<op>>=|<=|>|<|=)?\s*(?P<version>" + VERSION_PATTERN + r")(?=\s|$)"
)

_COMPARATORS = {
    "=": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}


class InvalidConstraint(ValueError):
    """A constraint string does not follow the clause grammar."""

    def __init__(self, constraint: Optional[str], manager_name: Optional[str] = None):
        self.constraint = constraint
        self.manager_name = manager_name
        super().__init__(f"Unrecognized constraint format for {manager_name or 'unknown'}: {constraint}")


class EmptyConstraint(InvalidConstraint):
    """The constraint string is missing or blank."""


@dataclass(frozen=True)
class Requirement:
    """Ordered (operator, version) clauses that must all hold."""
    clauses: Tuple[Tuple[str, str], ...]

    @classmethod
    def parse(cls, constraint: Optional[str], manager_name: Optional[str] = None) -> "Requirement":
        return parse_requirement(constraint, manager_name)

    @property
    def constraints(self):
        return [f"{op} {version}" for op, version in self.clauses]

    @property
    def pinned_version(self) -> Optional[str]:
        """The version when this is a single equality clause."""
        if len(self.clauses) == 1 and self.clauses[0][0] == "=":
            return self.clauses[0][1]
        return None

    def is_satisfied_by(self, version: Optional[str]) -> bool:
        """Check every clause against ``version``.

        Partial versions on either side are coerced ("8" -> 8.0.0).
        """
        if not version:
            return False
        try:
            candidate = semantic_version.Version.coerce(str(version).strip())
            bounds = [(op, semantic_version.Version.coerce(bound)) for op, bound in self.clauses]
        except ValueError:
            return False
        return all(_COMPARATORS[op](candidate, bound) for op, bound in bounds)

    def __str__(self) -> str:
        return ", ".join(self.constraints)


def parse_requirement(constraint: Optional[str], manager_name: Optional[str] = None) -> Requirement:
    """Parse a constraint string into a Requirement.

    Args:
        constraint: Raw constraint, e.g. ``">=6.0.0 <8.0.0"``.
        manager_name: Package manager the constraint belongs to, used in errors.

    Returns:
        A Requirement with at least one clause.

    Raises:
        EmptyConstraint: Missing or blank input.
        InvalidConstraint: Any token outside the grammar, or a version
            semantic_version cannot read.
    """
    if constraint is None or not str(constraint).strip():
        raise EmptyConstraint(constraint, manager_name)

    raw = str(constraint).strip()
    clauses = []
    pos = 0
    while pos < len(raw):
        match = _CLAUSE_RE.match(raw, pos)
        if not match:
            raise InvalidConstraint(raw, manager_name)
        version = match.group("version")
        try:
            semantic_version.Version.coerce(version)
        except ValueError as exc:
            raise InvalidConstraint(raw, manager_name) from exc
        clauses.append((match.group("op") or "=", version))
        pos = match.end()

    return Requirement(clauses=tuple(clauses))
