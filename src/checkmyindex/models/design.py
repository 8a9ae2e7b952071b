"""Sequencing design data models."""

from dataclasses import dataclass, field
from typing import Optional

from .chemistry import Chemistry
from .index import Combination, Index


@dataclass(frozen=True)
class DesignRow:
    """One sample of a design, as exported to the tab-delimited table."""

    sample: int
    lane: int
    index_id: str
    sequence: str
    color: str
    index2_id: Optional[str] = None
    sequence2: Optional[str] = None
    color2: Optional[str] = None


@dataclass
class Lane:
    """A pool of samples sequenced together.

    indexes2 holds the i5 indexes for dual-indexing, paired position by
    position with indexes.
    """

    number: int
    indexes: tuple[Index, ...]
    indexes2: Optional[tuple[Index, ...]] = None

    def __post_init__(self):
        if self.indexes2 is not None and len(self.indexes2) != len(self.indexes):
            raise ValueError(
                f"Lane {self.number}: {len(self.indexes)} i7 indexes but "
                f"{len(self.indexes2)} i5 indexes"
            )

    @property
    def is_dual(self) -> bool:
        return self.indexes2 is not None

    @property
    def size(self) -> int:
        return len(self.indexes)

    @property
    def ids(self) -> frozenset[str]:
        """Ids of the i7 indexes in this lane."""
        return frozenset(index.id for index in self.indexes)

    @property
    def ids2(self) -> frozenset[str]:
        """Ids of the i5 indexes in this lane (empty for single-indexing)."""
        return frozenset(index.id for index in self.indexes2 or ())

    @property
    def combination(self) -> Combination:
        return Combination.of(self.indexes)

    @property
    def combination2(self) -> Optional[Combination]:
        return Combination.of(self.indexes2) if self.indexes2 is not None else None


@dataclass
class Design:
    """Ordered lanes assigning indexes to every sample of an experiment."""

    chemistry: Chemistry
    multiplexing_rate: int
    lanes: list[Lane] = field(default_factory=list)

    @property
    def nb_lanes(self) -> int:
        return len(self.lanes)

    @property
    def nb_samples(self) -> int:
        return sum(lane.size for lane in self.lanes)

    @property
    def is_dual(self) -> bool:
        return any(lane.is_dual for lane in self.lanes)

    def rows(self) -> list[DesignRow]:
        """Flatten the design into one row per sample, numbered in lane order."""
        rows = []
        sample = 0
        for lane in self.lanes:
            second = lane.indexes2 or (None,) * lane.size
            for index, index2 in zip(lane.indexes, second):
                sample += 1
                rows.append(
                    DesignRow(
                        sample=sample,
                        lane=lane.number,
                        index_id=index.id,
                        sequence=index.sequence,
                        color=self.chemistry.color_profile(index.sequence),
                        index2_id=index2.id if index2 else None,
                        sequence2=index2.sequence if index2 else None,
                        color2=self.chemistry.color_profile(index2.sequence) if index2 else None,
                    )
                )
        return rows
