"""Assemble multi-lane designs from compatible index combinations.

Testing every combination of multiplexing_rate indexes quickly becomes
impossible, so by default the search looks for lanes with a smaller core of
compatible indexes and then completes each lane with random remaining
indexes. Adding indexes to a compatible combination keeps it compatible, so
the completed lanes are valid by construction (and checked again anyway).
When the trials at one core size fail, larger cores are tried, up to the
full multiplexing rate. Searching directly at the full multiplexing rate
(complete_lane=True) is slower but does not depend on small cores being
available.
"""

import logging
import random
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Iterable, Iterator, Optional

from ..exceptions import InvalidInputError, NoSolutionFoundError
from ..models.chemistry import Chemistry
from ..models.design import Design, Lane
from ..models.index import Combination, Index
from ..models.search import (
    SearchContext,
    SearchSettings,
    TrialSearch,
    TrialState,
    UniquenessConstraint,
    UniquenessLedger,
)
from .color_model import ColorModel
from .combination_generator import CombinationGenerator
from .compatibility_graph import CompatibilityGraphBuilder

logger = logging.getLogger(__name__)


class LaneAssembler:
    """Build nb_lanes lanes of compatible indexes within a trial budget."""

    def __init__(self, chemistry: Chemistry, settings: Optional[SearchSettings] = None):
        self.chemistry = chemistry
        self.settings = settings or SearchSettings()

    def assemble(
        self,
        pool: Iterable[Index],
        multiplexing_rate: int,
        nb_lanes: int,
        constraint: UniquenessConstraint = UniquenessConstraint.NONE,
        complete_lane: bool = False,
        max_trials: int = 10,
        use_graph: bool = False,
        seed: Optional[int] = None,
        workers: int = 1,
    ) -> Design:
        """
        Search for a design of nb_lanes lanes of multiplexing_rate indexes.

        Args:
            pool: Available indexes with distinct ids. Indexes the chemistry
                can never decode are left out
            multiplexing_rate: Number of samples per lane
            nb_lanes: Number of lanes to build
            constraint: Cross-lane reuse rule
            complete_lane: Search directly at the full multiplexing rate
                instead of completing smaller compatible cores
            max_trials: Number of fresh attempts before giving up, shared
                by every core size tried
            use_graph: Restrict candidates to pairwise-compatible indexes
            seed: Seed for reproducible searches
            workers: Number of processes running trials concurrently

        Returns:
            Design with lanes numbered from 1

        Raises:
            InvalidInputError: If the sizes cannot describe any design
            NoSolutionFoundError: If every trial failed
        """
        indexes = [
            index for index in pool if ColorModel.is_index_usable(index.sequence, self.chemistry)
        ]
        constraint = UniquenessConstraint.parse(constraint)
        self._check_sizes(indexes, multiplexing_rate, nb_lanes, workers)
        search = TrialSearch(max_trials=max_trials)

        graph = CompatibilityGraphBuilder.build(indexes, self.chemistry) if use_graph else None
        ctx = SearchContext(chemistry=self.chemistry, pool=indexes, graph=graph)
        generator = CombinationGenerator(self.chemistry, self.settings, graph)

        rng = random.Random(seed)
        if complete_lane:
            start = multiplexing_rate
        else:
            start = self._select_core_size(ctx, generator, multiplexing_rate, rng)
        core_sizes = self._core_size_schedule(start, multiplexing_rate, max_trials)

        logger.info(
            f"Searching {nb_lanes} lane(s) of {multiplexing_rate} indexes among "
            f"{len(indexes)} (constraint: {constraint.value}, core sizes: "
            f"{', '.join(str(k) for k in core_sizes)}, max trials: {max_trials})"
        )

        trial_seeds = [rng.getrandbits(64) for _ in range(max_trials)]
        for position, core_size in enumerate(core_sizes):
            remaining = max_trials - search.trials_used
            if remaining == 0:
                break
            self._cache_candidates(ctx, generator, core_size)
            if not self._cores_can_fill(ctx, core_size, nb_lanes, constraint):
                logger.info(
                    f"Not enough disjoint compatible cores of {core_size} indexes "
                    f"for {nb_lanes} lane(s), trying larger cores"
                )
                continue

            # The last core size gets every trial left
            sizes_left = len(core_sizes) - position
            budget = remaining if sizes_left == 1 else max(1, remaining // sizes_left)
            seeds = trial_seeds[search.trials_used:search.trials_used + budget]
            logger.debug(f"Core size {core_size}: {budget} trial(s)")

            args = (ctx, generator, core_size, multiplexing_rate, nb_lanes, constraint)
            if workers > 1:
                self._run_parallel(search, args, seeds, workers)
            else:
                for trial_seed in seeds:
                    lanes = self.run_trial(*args, rng=random.Random(trial_seed))
                    self._record(search, lanes, multiplexing_rate)
                    if not search.is_searching:
                        break
            if not search.is_searching:
                break

        if search.state is TrialState.SUCCEEDED:
            logger.info(f"Solution found at trial {search.trials_used}/{max_trials}")
            return search.design

        raise NoSolutionFoundError(
            search.trials_used,
            f"could not build {nb_lanes} lane(s) of {multiplexing_rate} compatible indexes",
        )

    def run_trial(
        self,
        ctx: SearchContext,
        generator: CombinationGenerator,
        core_size: int,
        multiplexing_rate: int,
        nb_lanes: int,
        constraint: UniquenessConstraint,
        rng: random.Random,
    ) -> Optional[list[Lane]]:
        """
        One attempt at assembling every lane from scratch.

        Returns:
            The lanes, or None when some lane could not be filled
        """
        ledger = UniquenessLedger(constraint)
        position = {index.id: i for i, index in enumerate(ctx.pool)}
        lanes = []
        for number in range(1, nb_lanes + 1):
            combination = self._draw_lane(ctx, generator, ledger, core_size, multiplexing_rate, rng)
            if combination is None:
                logger.debug(f"Trial failed at lane {number}/{nb_lanes}")
                return None
            ledger.record(combination)
            lanes.append(
                Lane(
                    number=number,
                    indexes=tuple(sorted(combination, key=lambda index: position[index.id])),
                )
            )
        return lanes

    def _check_sizes(
        self, indexes: list[Index], multiplexing_rate: int, nb_lanes: int, workers: int
    ) -> None:
        errors = []
        if multiplexing_rate < 1:
            errors.append("Multiplexing rate must be at least 1.")
        elif multiplexing_rate > len(indexes):
            errors.append(
                f"Multiplexing rate ({multiplexing_rate}) can't be higher than the "
                f"number of usable input indexes ({len(indexes)})."
            )
        if nb_lanes < 1:
            errors.append("Number of lanes must be at least 1.")
        if workers < 1:
            errors.append("Number of workers must be at least 1.")
        if errors:
            raise InvalidInputError(errors)

    def _select_core_size(
        self,
        ctx: SearchContext,
        generator: CombinationGenerator,
        multiplexing_rate: int,
        rng: random.Random,
    ) -> int:
        """Smallest core size with at least one compatible combination."""
        start = min(self.settings.core_start_size, multiplexing_rate)
        for size in range(start, multiplexing_rate):
            if generator.is_exhaustive(len(ctx.pool), size):
                self._cache_candidates(ctx, generator, size)
                found = bool(ctx.candidates[size])
            else:
                found = next(generator.generate(ctx.pool, size, rng), None) is not None
            if found:
                return size
            logger.debug(f"No compatible combination of {size} indexes, trying larger cores")
        return multiplexing_rate

    @staticmethod
    def _core_size_schedule(start: int, multiplexing_rate: int, max_trials: int) -> list[int]:
        """Core sizes tried in turn, from start up to the full multiplexing rate.

        With more sizes than trials, evenly spaced sizes are kept, both ends
        included (only the smallest for a single trial).
        """
        sizes = list(range(start, multiplexing_rate + 1))
        if len(sizes) <= max_trials:
            return sizes
        if max_trials == 1:
            return [start]
        step = (len(sizes) - 1) / (max_trials - 1)
        return sorted({sizes[round(i * step)] for i in range(max_trials)})

    @staticmethod
    def _cores_can_fill(
        ctx: SearchContext,
        core_size: int,
        nb_lanes: int,
        constraint: UniquenessConstraint,
    ) -> bool:
        """Whether enumerated cores can give every lane its own indexes.

        Only the index constraint needs nb_lanes disjoint cores. Sampled
        (non-enumerated) core sizes are always tried.
        """
        candidates = ctx.candidates.get(core_size)
        if constraint is not UniquenessConstraint.INDEX or candidates is None:
            return True
        covered = set().union(*(core.ids for core in candidates))
        return len(candidates) >= nb_lanes and len(covered) >= nb_lanes * core_size

    def _cache_candidates(
        self, ctx: SearchContext, generator: CombinationGenerator, size: int
    ) -> None:
        """Enumerate the run's compatible combinations once when feasible."""
        if size in ctx.candidates:
            return
        if generator.is_exhaustive(len(ctx.pool), size):
            ctx.candidates[size] = generator.compatible_combinations(ctx.pool, size)
        else:
            ctx.candidates[size] = None

    def _draw_lane(
        self,
        ctx: SearchContext,
        generator: CombinationGenerator,
        ledger: UniquenessLedger,
        core_size: int,
        multiplexing_rate: int,
        rng: random.Random,
    ) -> Optional[Combination]:
        available = ledger.available(ctx.pool)
        if len(available) < multiplexing_rate:
            return None
        for core in self._cores(ctx, generator, ledger, available, core_size, rng):
            lane = self._complete(ctx, ledger, core, available, multiplexing_rate, rng)
            if lane is not None:
                return lane
        return None

    def _cores(
        self,
        ctx: SearchContext,
        generator: CombinationGenerator,
        ledger: UniquenessLedger,
        available: list[Index],
        core_size: int,
        rng: random.Random,
    ) -> Iterator[Combination]:
        """Compatible cores admitted by the ledger, in random order."""
        candidates = ctx.candidates.get(core_size)
        if candidates is None:
            cores: Iterable[Combination] = generator.generate(available, core_size, rng)
        else:
            cores = rng.sample(candidates, len(candidates))
        for core in cores:
            if ledger.admits_core(core):
                yield core

    def _complete(
        self,
        ctx: SearchContext,
        ledger: UniquenessLedger,
        core: Combination,
        available: list[Index],
        multiplexing_rate: int,
        rng: random.Random,
    ) -> Optional[Combination]:
        """Add random available indexes to core until the lane is full."""
        missing = multiplexing_rate - len(core)
        if missing == 0:
            return core if ledger.admits(core) else None

        extras = [index for index in available if index.id not in core.ids]
        if len(extras) < missing:
            return None

        attempts = (
            self.settings.completion_attempts
            if ledger.constraint is UniquenessConstraint.LANE
            else 1
        )
        for _ in range(attempts):
            lane = core.extended(rng.sample(extras, missing))
            if ledger.admits(lane) and ColorModel.is_compatible(lane.sequences, ctx.chemistry):
                return lane
        return None

    def _record(
        self, search: TrialSearch, lanes: Optional[list[Lane]], multiplexing_rate: int
    ) -> None:
        if lanes is None:
            search.record_failure()
            logger.debug(f"Trial {search.trials_used}/{search.max_trials} failed")
        else:
            search.record_success(
                Design(chemistry=self.chemistry, multiplexing_rate=multiplexing_rate, lanes=lanes)
            )

    def _run_parallel(
        self, search: TrialSearch, args: tuple, trial_seeds: list[int], workers: int
    ) -> None:
        """Run trials in worker processes; the first successful one wins."""
        executor = ProcessPoolExecutor(max_workers=workers)
        try:
            futures = [
                executor.submit(_run_trial_in_worker, self, args, trial_seed)
                for trial_seed in trial_seeds
            ]
            for future in as_completed(futures):
                self._record(search, future.result(), args[3])
                if not search.is_searching:
                    break
        finally:
            executor.shutdown(wait=True, cancel_futures=True)


def _run_trial_in_worker(
    assembler: LaneAssembler, args: tuple, trial_seed: int
) -> Optional[list[Lane]]:
    """Process pool entry point: one trial with its own ledger and rng."""
    return assembler.run_trial(*args, rng=random.Random(trial_seed))
