"""Design request: everything the search needs from the caller."""

from dataclasses import dataclass
from typing import Optional, Union

from .chemistry import Chemistry
from .index import IndexPool
from .search import UniquenessConstraint


@dataclass
class DesignRequest:
    """Parameters of one index design search.

    Attributes:
        pool_i7: Available index 1 (i7) indexes
        nb_samples: Total number of samples, a multiple of multiplexing_rate
        multiplexing_rate: Number of samples per lane
        chemistry: Chemistry code (1, 2 or 4) or Chemistry
        pool_i5: Optional index 2 (i5) indexes for dual-indexing
        constraint: Cross-lane reuse rule ("none", "lane" or "index")
        complete_lane: Search directly at the full multiplexing rate
        select_comp_indexes: Precompute the pairwise compatibility graph
        max_trials: Maximum number of search trials
        workers: Number of processes running trials
        seed: Seed for a reproducible search
    """

    pool_i7: IndexPool
    nb_samples: int
    multiplexing_rate: int
    chemistry: Union[int, Chemistry]
    pool_i5: Optional[IndexPool] = None
    constraint: Union[str, UniquenessConstraint] = UniquenessConstraint.NONE
    complete_lane: bool = False
    select_comp_indexes: bool = False
    max_trials: int = 10
    workers: int = 1
    seed: Optional[int] = None

    @property
    def is_dual(self) -> bool:
        return self.pool_i5 is not None

    @property
    def nb_lanes(self) -> int:
        return self.nb_samples // self.multiplexing_rate if self.multiplexing_rate else 0
