"""Overlap and rotation rule tables.

Rule tables are read-only reference data injected into the overlap resolver:

- OverlapRule: allowed overlap range for glyphs following a letter
- RotationRule: stylistic tilt applied before/after specific neighbours
- RuleTables: the complete bundle, including the exception pairs that get
  dampened overlap and the optional precomputed pairwise lookup table
"""

import string
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from graffitizer.exceptions import RuleTableError


def normalize_letter(letter: str) -> str:
    """Lower-case alphabetic characters; leave everything else untouched."""
    return letter.lower() if letter.isalpha() else letter


def _frozen_floats(values: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType({normalize_letter(k): float(v) for k, v in values.items()})


@dataclass(frozen=True)
class OverlapRule:
    """Allowed overlap range for the glyph following a letter.

    Attributes:
        min_overlap: Smallest fraction of the previous glyph width to overlap
        max_overlap: Largest fraction of the previous glyph width to overlap
        special_cases: Next-letter overrides of the overlap target
    """

    min_overlap: float
    max_overlap: float
    special_cases: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_overlap <= self.max_overlap <= 1.0:
            raise RuleTableError(
                f"Overlap range must satisfy 0 <= min <= max <= 1, "
                f"got min={self.min_overlap} max={self.max_overlap}"
            )
        for letter, value in self.special_cases.items():
            if not 0.0 <= value <= 1.0:
                raise RuleTableError(
                    f"Special-case overlap for '{letter}' must be in [0, 1], got {value}"
                )
        object.__setattr__(self, "special_cases", _frozen_floats(self.special_cases))

    def target_for(self, next_letter: str) -> float:
        """Overlap target for a following letter before any dampening."""
        return self.special_cases.get(normalize_letter(next_letter), self.max_overlap)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "min": self.min_overlap,
            "max": self.max_overlap,
            "special_cases": dict(self.special_cases),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OverlapRule":
        """Deserialize from dictionary.

        Raises:
            RuleTableError: If required keys are missing
        """
        try:
            return cls(
                min_overlap=float(data["min"]),
                max_overlap=float(data["max"]),
                special_cases=data.get("special_cases", {}),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RuleTableError(f"Invalid overlap rule {data!r}: {e}") from e


@dataclass(frozen=True)
class RotationRule:
    """Tilt in degrees applied to a glyph depending on its neighbours.

    Attributes:
        before: Tilt of this letter when preceded by the keyed letter
        after: Tilt of the keyed letter when it follows this letter
    """

    before: Mapping[str, float] = field(default_factory=dict)
    after: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "before", _frozen_floats(self.before))
        object.__setattr__(self, "after", _frozen_floats(self.after))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {"before": dict(self.before), "after": dict(self.after)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RotationRule":
        """Deserialize from dictionary."""
        return cls(before=data.get("before", {}), after=data.get("after", {}))


@dataclass(frozen=True)
class RuleTables:
    """Complete, immutable set of overlap reference data.

    Attributes:
        rules: Per-letter overlap rules, keyed by the previous letter
        default_rule: Rule used for letters without an entry
        exceptions: Ordered (previous, next) pairs whose overlap is dampened
        rotations: Per-letter rotation rules
        lookup: Precomputed overlap values keyed by previous then next letter
    """

    rules: Mapping[str, OverlapRule]
    default_rule: OverlapRule
    exceptions: frozenset[tuple[str, str]] = frozenset()
    rotations: Mapping[str, RotationRule] = field(default_factory=dict)
    lookup: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "rules",
            MappingProxyType({normalize_letter(k): v for k, v in self.rules.items()}),
        )
        object.__setattr__(
            self,
            "exceptions",
            frozenset((normalize_letter(a), normalize_letter(b)) for a, b in self.exceptions),
        )
        object.__setattr__(
            self,
            "rotations",
            MappingProxyType({normalize_letter(k): v for k, v in self.rotations.items()}),
        )
        lookup: dict[str, Mapping[str, float]] = {}
        for prev, row in self.lookup.items():
            for curr, value in row.items():
                if not 0.0 <= value <= 1.0:
                    raise RuleTableError(
                        f"Lookup overlap for '{prev}{curr}' must be in [0, 1], got {value}"
                    )
            lookup[normalize_letter(prev)] = _frozen_floats(row)
        object.__setattr__(self, "lookup", MappingProxyType(lookup))

    def rule_for(self, letter: str) -> OverlapRule:
        """Get the rule for a previous letter, falling back to the default."""
        return self.rules.get(normalize_letter(letter), self.default_rule)

    def is_exception(self, prev_letter: str, curr_letter: str) -> bool:
        """Check whether a pair is listed for overlap dampening."""
        return (normalize_letter(prev_letter), normalize_letter(curr_letter)) in self.exceptions

    def lookup_value(self, prev_letter: str, curr_letter: str) -> float | None:
        """Get a precomputed overlap, or None when the pair is not in the table."""
        row = self.lookup.get(normalize_letter(prev_letter))
        if row is None:
            return None
        return row.get(normalize_letter(curr_letter))

    def with_lookup(self, lookup: Mapping[str, Mapping[str, float]]) -> "RuleTables":
        """Return a copy of these tables carrying a different lookup table."""
        return RuleTables(
            rules=self.rules,
            default_rule=self.default_rule,
            exceptions=self.exceptions,
            rotations=self.rotations,
            lookup=lookup,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        exceptions: dict[str, list[str]] = {}
        for prev, curr in sorted(self.exceptions):
            exceptions.setdefault(prev, []).append(curr)
        return {
            "default": self.default_rule.to_dict(),
            "rules": {k: v.to_dict() for k, v in sorted(self.rules.items())},
            "exceptions": exceptions,
            "rotations": {k: v.to_dict() for k, v in sorted(self.rotations.items())},
            "lookup": {k: dict(sorted(v.items())) for k, v in sorted(self.lookup.items())},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RuleTables":
        """Deserialize from dictionary.

        Raises:
            RuleTableError: If the data is structurally invalid
        """
        if "default" not in data:
            raise RuleTableError("Rule tables require a 'default' rule")
        try:
            return cls(
                rules={k: OverlapRule.from_dict(v) for k, v in data.get("rules", {}).items()},
                default_rule=OverlapRule.from_dict(data["default"]),
                exceptions=exception_pairs(data.get("exceptions", {})),
                rotations={
                    k: RotationRule.from_dict(v) for k, v in data.get("rotations", {}).items()
                },
                lookup=data.get("lookup", {}),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise RuleTableError(f"Invalid rule tables: {e}") from e


def exception_pairs(mapping: Mapping[str, Iterable[str]]) -> frozenset[tuple[str, str]]:
    """Expand a previous-letter -> next-letters mapping into ordered pairs."""
    return frozenset((prev, curr) for prev, nexts in mapping.items() for curr in nexts)


DEFAULT_OVERLAP_RULE = OverlapRule(min_overlap=0.1, max_overlap=0.3)

LETTER_OVERLAP_RULES: Mapping[str, OverlapRule] = MappingProxyType(
    {letter: OverlapRule(min_overlap=0.1, max_overlap=0.3) for letter in string.ascii_lowercase}
)

# Diagonal strokes collide when packed tightly against round letters
OVERLAP_EXCEPTIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "a": ("v", "w", "y"),
        "v": ("a", "e", "o"),
        "w": ("a", "e", "o"),
        "y": ("a", "e", "o"),
    }
)

LETTER_ROTATION_RULES: Mapping[str, RotationRule] = MappingProxyType(
    {
        "a": RotationRule(after={"v": 5, "w": 5, "y": 5}),
        "v": RotationRule(before={"a": -5, "e": -5, "o": -5}),
        "w": RotationRule(before={"a": -5, "e": -5, "o": -5}),
        "y": RotationRule(before={"a": -5, "e": -5, "o": -5}),
    }
)


def default_rule_tables() -> RuleTables:
    """Get the rule tables shipped with graffitizer (no lookup values)."""
    return RuleTables(
        rules=LETTER_OVERLAP_RULES,
        default_rule=DEFAULT_OVERLAP_RULE,
        exceptions=exception_pairs(OVERLAP_EXCEPTIONS),
        rotations=LETTER_ROTATION_RULES,
    )
