"""Sequencing chemistry models."""

from dataclasses import dataclass, field
from enum import Enum


class CompatibilityRule(Enum):
    """How the colors present at a position decide compatibility."""

    ALL_COLORS = "all_colors"  # Every chemistry color must be seen at each position
    ANY_COLOR = "any_color"  # At least one color must be seen at each position


@dataclass(frozen=True)
class Chemistry:
    """Optical base-calling scheme of an Illumina instrument family.

    Attributes:
        code: Number of channels (1, 2 or 4)
        name: Display name, e.g. "two-channel"
        base_colors: Colors emitted by each base (empty for a dark base)
        rule: Per-position compatibility rule
        instruments: Instruments using this chemistry
        base_symbols: One-letter color symbol per base, used in color profiles
        forbidden_prefixes: Index prefixes that can never be decoded
    """

    code: int
    name: str
    base_colors: dict[str, frozenset[str]]
    rule: CompatibilityRule
    instruments: tuple[str, ...] = ()
    base_symbols: dict[str, str] = field(default_factory=dict)
    forbidden_prefixes: tuple[str, ...] = ()

    def __hash__(self) -> int:
        return hash(self.code)

    @property
    def colors(self) -> frozenset[str]:
        """All colors emitted by at least one base."""
        return frozenset().union(*self.base_colors.values())

    @property
    def description(self) -> str:
        """Human-readable label, e.g. "four-channel (HiSeq & MiSeq)"."""
        if not self.instruments:
            return self.name
        return f"{self.name} ({' & '.join(self.instruments)})"

    def color_profile(self, sequence: str) -> str:
        """One symbol per base, "-" for a dark base (e.g. "RRGG" for ACGT)."""
        return "".join(self.base_symbols.get(base, "-") for base in sequence)
