"""Search parameters and run/trial state for lane assembly."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from ..exceptions import InvalidInputError
from .chemistry import Chemistry
from .index import Combination, Index

if TYPE_CHECKING:
    from ..services.compatibility_graph import CompatibilityGraph
    from .design import Design


class UniquenessConstraint(Enum):
    """Cross-lane reuse rule for indexes."""

    NONE = "none"  # Indexes and combinations may repeat across lanes
    LANE = "lane"  # Each combination of indexes is used at most once
    INDEX = "index"  # Each index is used at most once

    @property
    def description(self) -> str:
        return {
            UniquenessConstraint.NONE: "none",
            UniquenessConstraint.LANE: "use each combination of compatible indexes only once",
            UniquenessConstraint.INDEX: "use each index only once",
        }[self]

    @classmethod
    def parse(cls, value: "str | UniquenessConstraint") -> "UniquenessConstraint":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Unicity constraint must be one of 'none', 'lane' or 'index' (got '{value}')."
            ) from None


@dataclass(frozen=True)
class SearchSettings:
    """Tuning knobs of the combination search.

    Attributes:
        exhaustive_limit: Largest number of k-subsets enumerated exhaustively;
            above it subsets are sampled at random
        max_random_draws: Random subsets drawn per lane before giving up
        completion_attempts: Random completions tried per lane under the
            lane constraint before the trial fails
        core_start_size: Smallest core size tried by the partial search
    """

    exhaustive_limit: int = 20000
    max_random_draws: int = 2000
    completion_attempts: int = 20
    core_start_size: int = 2


@dataclass
class UniquenessLedger:
    """Per-trial record of what earlier lanes consumed.

    Never share a ledger between trials: both constraints are stateful within
    one attempt.
    """

    constraint: UniquenessConstraint
    used_ids: set[str] = field(default_factory=set)
    used_combinations: set[frozenset[str]] = field(default_factory=set)

    def available(self, indexes: Iterable[Index]) -> list[Index]:
        """Indexes still usable by the next lane."""
        if self.constraint is UniquenessConstraint.INDEX:
            return [index for index in indexes if index.id not in self.used_ids]
        return list(indexes)

    def admits(self, combination: Combination) -> bool:
        """Whether a finished lane made of combination may be added."""
        if self.constraint is UniquenessConstraint.INDEX:
            return self.used_ids.isdisjoint(combination.ids)
        if self.constraint is UniquenessConstraint.LANE:
            return combination.ids not in self.used_combinations
        return True

    def admits_core(self, core: Combination) -> bool:
        """Whether a partial core may still grow into an admitted lane."""
        if self.constraint is UniquenessConstraint.INDEX:
            return self.used_ids.isdisjoint(core.ids)
        # A reused core can still be completed into a new lane
        return True

    def record(self, combination: Combination) -> None:
        self.used_ids.update(combination.ids)
        self.used_combinations.add(combination.ids)


@dataclass
class SearchContext:
    """Run-scoped search state, threaded explicitly through lane assembly.

    Holds the optional compatibility graph and the exhaustive candidate lists
    computed once per run, keyed by combination size.
    """

    chemistry: Chemistry
    pool: list[Index]
    graph: Optional["CompatibilityGraph"] = None
    candidates: dict[int, Optional[list[Combination]]] = field(default_factory=dict)


class TrialState(Enum):
    """States of the trial-bounded search."""

    SEARCHING = "searching"
    SUCCEEDED = "succeeded"
    EXHAUSTED_TRIALS = "exhausted_trials"


@dataclass
class TrialSearch:
    """Trial counter moving from SEARCHING to SUCCEEDED or EXHAUSTED_TRIALS."""

    max_trials: int
    trials_used: int = 0
    state: TrialState = TrialState.SEARCHING
    design: Optional["Design"] = None

    def __post_init__(self):
        if self.max_trials < 1:
            raise InvalidInputError("Number of trials must be an integer greater than 0.")

    @property
    def is_searching(self) -> bool:
        return self.state is TrialState.SEARCHING

    def record_failure(self) -> None:
        self._check_searching()
        self.trials_used += 1
        if self.trials_used >= self.max_trials:
            self.state = TrialState.EXHAUSTED_TRIALS

    def record_success(self, design: "Design") -> None:
        self._check_searching()
        self.trials_used += 1
        self.design = design
        self.state = TrialState.SUCCEEDED

    def _check_searching(self) -> None:
        if not self.is_searching:
            raise RuntimeError(f"Trial search already finished ({self.state.value})")
