"""Overlap resolution between adjacent glyphs.

For every adjacent pair the resolver produces the fraction of the previous
glyph's ink width that the next glyph may overlap, plus a stylistic rotation.

Two strategies exist:
- LookupStrategy: precomputed pairwise values, falling back to the rules
- AnalyticalStrategy: slides the glyphs' column occupancy profiles against
  each other and backs off until dense ink stops colliding

Both are pure functions of the glyphs and the injected immutable RuleTables.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping

from graffitizer.config import OverlapConfig, OverlapMode
from graffitizer.domain import ProcessedGlyph, RuleTables, normalize_letter


def rule_based_overlap(
    prev_letter: str,
    curr_letter: str,
    tables: RuleTables,
    dampening: float = 0.7,
) -> float:
    """Compute the overlap target for a pair from the rule tables alone.

    The rule of the previous letter (or the default rule) supplies the range.
    A special case for the next letter replaces the maximum as the target, and
    listed exception pairs are dampened, never below the rule minimum.

    Args:
        prev_letter: Letter on the left
        curr_letter: Letter on the right
        tables: Overlap reference data
        dampening: Multiplier applied to exception pairs

    Returns:
        Overlap fraction in [0, 1]
    """
    rule = tables.rule_for(prev_letter)
    target = rule.target_for(curr_letter)
    if tables.is_exception(prev_letter, curr_letter):
        target = max(rule.min_overlap, target * dampening)
    return min(max(target, 0.0), 1.0)


def rotation_adjustment(prev_letter: str, curr_letter: str, tables: RuleTables) -> float:
    """Rotation in degrees for the right-hand glyph of a pair.

    The previous letter's ``after`` entry for the current letter wins; the
    current letter's ``before`` entry for the previous letter is the fallback.
    """
    prev_key = normalize_letter(prev_letter)
    curr_key = normalize_letter(curr_letter)

    prev_rule = tables.rotations.get(prev_key)
    if prev_rule is not None and curr_key in prev_rule.after:
        return prev_rule.after[curr_key]

    curr_rule = tables.rotations.get(curr_key)
    if curr_rule is not None:
        return curr_rule.before.get(prev_key, 0.0)
    return 0.0


class OverlapStrategy(ABC):
    """Base class for overlap resolution strategies."""

    def __init__(self, tables: RuleTables, config: OverlapConfig | None = None) -> None:
        self.tables = tables
        self.config = config or OverlapConfig()

    def overlap(self, prev: ProcessedGlyph, curr: ProcessedGlyph) -> float:
        """Overlap fraction for ``curr`` following ``prev``.

        Whitespace never overlaps its neighbours.

        Returns:
            Fraction of the previous glyph's ink width in [0, 1]
        """
        if prev.is_space or curr.is_space:
            return 0.0
        return min(max(self._resolve(prev, curr), 0.0), 1.0)

    def rotation(self, prev_letter: str, curr_letter: str) -> float:
        """Rotation in degrees for ``curr_letter`` following ``prev_letter``."""
        return rotation_adjustment(prev_letter, curr_letter, self.tables)

    def rule_target(self, prev_letter: str, curr_letter: str) -> float:
        """Rule-based overlap using this strategy's dampening factor."""
        return rule_based_overlap(
            prev_letter, curr_letter, self.tables, self.config.exception_dampening
        )

    @abstractmethod
    def _resolve(self, prev: ProcessedGlyph, curr: ProcessedGlyph) -> float:
        """Compute the overlap of two non-space glyphs."""
        ...


class LookupStrategy(OverlapStrategy):
    """Precomputed lookup table with rule-based fallback on a miss."""

    def _resolve(self, prev: ProcessedGlyph, curr: ProcessedGlyph) -> float:
        value = self.tables.lookup_value(prev.letter, curr.letter)
        if value is not None:
            return value
        return self.rule_target(prev.letter, curr.letter)


class AnalyticalStrategy(OverlapStrategy):
    """Column-occupancy analysis of the two glyphs.

    Candidates run from the rule target down to the rule minimum in fixed
    steps. The first candidate whose share of colliding columns stays within
    ``max_collision_ratio`` wins; when none does, the minimum is used.
    """

    def _resolve(self, prev: ProcessedGlyph, curr: ProcessedGlyph) -> float:
        rule = self.tables.rule_for(prev.letter)
        target = self.rule_target(prev.letter, curr.letter)
        minimum = min(rule.min_overlap, target)

        # Integer-indexed candidates avoid floating-point drift across the range
        step = self.config.analytical_step
        steps = int(math.floor((target - minimum) / step + 1e-9))
        for k in range(steps + 1):
            candidate = max(target - k * step, minimum)
            if self.collision_ratio(prev, curr, candidate) <= self.config.max_collision_ratio:
                return candidate

        return minimum

    def collision_ratio(self, prev: ProcessedGlyph, curr: ProcessedGlyph, overlap: float) -> float:
        """Share of sampled shared columns where dense ink collides.

        Args:
            prev: Glyph on the left
            curr: Glyph on the right
            overlap: Candidate overlap fraction of ``prev``'s ink width

        Returns:
            Ratio in [0, 1]; 0 when no shared column can be sampled
        """
        shared = prev.ink_width * overlap
        start_x = math.floor(prev.bounds.right - shared)
        end_x = math.ceil(prev.bounds.right)
        threshold = self.config.density_threshold

        samples = 0
        collisions = 0
        for x in range(max(0, start_x), end_x, self.config.column_step):
            curr_x = int(x - start_x + curr.bounds.left)
            prev_range = prev.column(x)
            curr_range = curr.column(curr_x)
            if prev_range is None or curr_range is None:
                continue
            samples += 1
            if (
                prev_range.density > threshold
                and curr_range.density > threshold
                and prev_range.intersects(curr_range)
            ):
                collisions += 1

        if samples == 0:
            return 0.0
        return collisions / samples


def create_strategy(tables: RuleTables, config: OverlapConfig | None = None) -> OverlapStrategy:
    """Create the overlap strategy selected by the configuration.

    Args:
        tables: Overlap reference data
        config: Overlap configuration (defaults to lookup mode)

    Returns:
        Strategy instance for the configured mode
    """
    config = config or OverlapConfig()
    if config.mode == OverlapMode.ANALYTICAL:
        return AnalyticalStrategy(tables, config)
    return LookupStrategy(tables, config)


def build_lookup_table(
    glyphs: Mapping[str, ProcessedGlyph],
    tables: RuleTables,
    config: OverlapConfig | None = None,
    precision: int = 3,
) -> dict[str, dict[str, float]]:
    """Precompute pairwise overlap values for a glyph set.

    Runs the analytical strategy over every ordered pair of non-space glyphs.

    Args:
        glyphs: Processed glyphs keyed by letter
        tables: Overlap reference data
        config: Overlap configuration
        precision: Decimal places kept in the table

    Returns:
        Nested mapping of previous letter to next letter to overlap
    """
    strategy = AnalyticalStrategy(tables, config)
    usable = {
        normalize_letter(letter): glyph
        for letter, glyph in sorted(glyphs.items())
        if not glyph.is_space
    }

    lookup: dict[str, dict[str, float]] = {}
    for prev_letter, prev in usable.items():
        row = lookup.setdefault(prev_letter, {})
        for curr_letter, curr in usable.items():
            row[curr_letter] = round(strategy.overlap(prev, curr), precision)
    return lookup
