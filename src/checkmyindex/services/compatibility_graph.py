"""Pairwise compatibility graph of an index pool."""

import logging
from dataclasses import dataclass
from itertools import combinations

import numpy as np

from ..models.chemistry import Chemistry
from ..models.index import Index
from .color_model import ColorModel

logger = logging.getLogger(__name__)


@dataclass
class CompatibilityGraph:
    """Undirected graph whose edges join pairwise-compatible indexes.

    adjacency is a symmetric boolean matrix indexed like ids.
    """

    ids: list[str]
    adjacency: np.ndarray

    def __post_init__(self):
        self._position = {index_id: i for i, index_id in enumerate(self.ids)}

    def __contains__(self, index_id: str) -> bool:
        return index_id in self._position

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(np.triu(self.adjacency, k=1)))

    def are_compatible(self, id1: str, id2: str) -> bool:
        return bool(self.adjacency[self._position[id1], self._position[id2]])

    def neighbors(self, index_id: str) -> frozenset[str]:
        row = self.adjacency[self._position[index_id]]
        return frozenset(self.ids[i] for i in np.flatnonzero(row))

    def is_clique(self, index_ids: list[str]) -> bool:
        """Whether every pair of index_ids is joined by an edge."""
        positions = [self._position[i] for i in index_ids]
        block = self.adjacency[np.ix_(positions, positions)]
        return bool(block.sum() == len(positions) * (len(positions) - 1))


class CompatibilityGraphBuilder:
    """Precompute all pairwise-compatible index pairs of a pool."""

    @classmethod
    def build(cls, pool: list[Index], chemistry: Chemistry) -> CompatibilityGraph:
        """
        Evaluate every pair of the pool with the color model.

        Takes O(n^2) pair checks, paid once per run to restrict later
        combination searches to cliques of this graph.

        Args:
            pool: Indexes to connect
            chemistry: Chemistry used for pair checks

        Returns:
            CompatibilityGraph over the pool
        """
        n = len(pool)
        adjacency = np.zeros((n, n), dtype=bool)
        for i, j in combinations(range(n), 2):
            if ColorModel.is_compatible(
                [pool[i].sequence, pool[j].sequence], chemistry
            ):
                adjacency[i, j] = adjacency[j, i] = True

        graph = CompatibilityGraph(ids=[index.id for index in pool], adjacency=adjacency)
        logger.info(
            f"Compatibility graph: {n} indexes, {graph.edge_count} compatible pairs "
            f"out of {n * (n - 1) // 2}"
        )
        return graph
