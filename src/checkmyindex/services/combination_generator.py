"""Generate compatible index combinations of a target size."""

import logging
import random
from itertools import combinations
from math import comb
from typing import Iterator, Optional

from ..models.chemistry import Chemistry
from ..models.index import Combination, Index
from ..models.search import SearchSettings
from .color_model import ColorModel
from .compatibility_graph import CompatibilityGraph

logger = logging.getLogger(__name__)


class CombinationGenerator:
    """Lazy source of compatible k-subsets of an index pool.

    Pools whose number of k-subsets is at most settings.exhaustive_limit are
    enumerated exhaustively. Larger ones are sampled at random without
    drawing the same subset twice, up to settings.max_random_draws draws.

    With a compatibility graph, only subsets whose members are pairwise
    compatible (cliques of the graph) are considered. Every yielded
    combination still passes the full color model check.
    """

    def __init__(
        self,
        chemistry: Chemistry,
        settings: Optional[SearchSettings] = None,
        graph: Optional[CompatibilityGraph] = None,
    ):
        self.chemistry = chemistry
        self.settings = settings or SearchSettings()
        self.graph = graph

    def is_exhaustive(self, pool_size: int, size: int) -> bool:
        """Whether k-subsets of a pool this size are enumerated exhaustively."""
        return comb(pool_size, size) <= self.settings.exhaustive_limit

    def generate(
        self,
        pool: list[Index],
        size: int,
        rng: Optional[random.Random] = None,
    ) -> Iterator[Combination]:
        """
        Yield compatible combinations of size indexes drawn from pool.

        Args:
            pool: Candidate indexes (distinct ids)
            size: Number of indexes per combination
            rng: Random source. Exhaustive enumeration is shuffled with it and
                follows pool order without it.

        Yields:
            Compatible Combination objects, each at most once
        """
        if size < 1 or size > len(pool):
            return

        if self.is_exhaustive(len(pool), size):
            subsets = self._enumerate(pool, size)
            if rng is not None:
                subsets = list(subsets)
                rng.shuffle(subsets)
        else:
            subsets = self._sample(pool, size, rng or random.Random())

        for members in subsets:
            if ColorModel.is_compatible([m.sequence for m in members], self.chemistry):
                yield Combination.of(members)

    def compatible_combinations(self, pool: list[Index], size: int) -> list[Combination]:
        """Every compatible combination of the pool, in pool order."""
        found = list(self.generate(pool, size))
        logger.info(
            f"{len(found)} compatible combinations of {size} indexes "
            f"among {len(pool)} indexes"
        )
        return found

    def _neighbors(self, pool: list[Index]) -> dict[str, frozenset[str]]:
        return {
            index.id: self.graph.neighbors(index.id)
            for index in pool
            if index.id in self.graph
        }

    def _enumerate(self, pool: list[Index], size: int) -> Iterator[tuple[Index, ...]]:
        """All k-subsets of the pool, or all k-cliques when a graph is set."""
        if self.graph is None:
            yield from combinations(pool, size)
            return

        neighbors = self._neighbors(pool)

        def extend(clique: list[Index], candidates: list[Index]):
            if len(clique) == size:
                yield tuple(clique)
                return
            for i, index in enumerate(candidates):
                if len(clique) + len(candidates) - i < size:
                    break
                linked = neighbors[index.id]
                yield from extend(
                    clique + [index],
                    [c for c in candidates[i + 1:] if c.id in linked],
                )

        yield from extend([], [index for index in pool if index.id in self.graph])

    def _sample(
        self, pool: list[Index], size: int, rng: random.Random
    ) -> Iterator[list[Index]]:
        """Random k-subsets (or grown cliques), never the same subset twice."""
        neighbors = None
        if self.graph is not None:
            neighbors = self._neighbors(pool)
            pool = [index for index in pool if index.id in neighbors]
            if len(pool) < size:
                return
        total = comb(len(pool), size)
        seen: set[frozenset[str]] = set()

        for _ in range(self.settings.max_random_draws):
            if len(seen) >= total:
                return
            if neighbors is None:
                members = rng.sample(pool, size)
            else:
                members = self._grow_clique(pool, size, rng, neighbors)
                if members is None:
                    continue
            key = frozenset(m.id for m in members)
            if key in seen:
                continue
            seen.add(key)
            yield members

    @staticmethod
    def _grow_clique(
        pool: list[Index],
        size: int,
        rng: random.Random,
        neighbors: dict[str, frozenset[str]],
    ) -> Optional[list[Index]]:
        members = [rng.choice(pool)]
        candidates = [c for c in pool if c.id in neighbors[members[0].id]]
        while len(members) < size and candidates:
            pick = rng.choice(candidates)
            members.append(pick)
            candidates = [c for c in candidates if c.id in neighbors[pick.id]]
        return members if len(members) == size else None
