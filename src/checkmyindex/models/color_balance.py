"""Per-lane color balance of a design."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ColorBalanceStatus(Enum):
    """Status of color balance at a position."""

    OK = "ok"  # Position decodable under the chemistry
    ERROR = "error"  # Missing color(s), the lane cannot be demultiplexed


@dataclass
class PositionColorBalance:
    """Color balance data for a single position in an index."""

    position: int  # 1-indexed position
    a_count: int = 0
    c_count: int = 0
    g_count: int = 0
    t_count: int = 0
    color_counts: dict[str, int] = field(default_factory=dict)
    status: ColorBalanceStatus = ColorBalanceStatus.OK

    @property
    def total(self) -> int:
        """Total number of bases at this position."""
        return self.a_count + self.c_count + self.g_count + self.t_count

    def color_percent(self, color: str) -> float:
        """Percentage of bases emitting color."""
        count = self.color_counts.get(color, 0)
        return (count / self.total * 100) if self.total > 0 else 0


@dataclass
class IndexColorBalance:
    """Color balance for all positions of an index type (i7 or i5)."""

    index_type: str  # "i7" or "i5"
    positions: list[PositionColorBalance] = field(default_factory=list)

    @property
    def max_position(self) -> int:
        """Maximum position number."""
        return max((p.position for p in self.positions), default=0)

    @property
    def has_issues(self) -> bool:
        return any(p.status != ColorBalanceStatus.OK for p in self.positions)

    @property
    def error_count(self) -> int:
        """Count positions with errors."""
        return sum(1 for p in self.positions if p.status == ColorBalanceStatus.ERROR)


@dataclass
class LaneColorBalance:
    """Color balance analysis for a single lane."""

    lane: int
    sample_count: int
    i7_balance: Optional[IndexColorBalance] = None
    i5_balance: Optional[IndexColorBalance] = None

    @property
    def has_issues(self) -> bool:
        """Check if lane has any color balance issues."""
        i7_issues = self.i7_balance.has_issues if self.i7_balance else False
        i5_issues = self.i5_balance.has_issues if self.i5_balance else False
        return i7_issues or i5_issues
