"""Entry point of the index design search."""

import logging
from typing import Optional

from ..data.chemistries import get_chemistry, get_search_settings
from ..exceptions import IncompatiblePoolTooSmallError, InvalidInputError
from ..models.chemistry import Chemistry
from ..models.design import Design
from ..models.index import Index, IndexPool
from ..models.request import DesignRequest
from ..models.search import SearchSettings, UniquenessConstraint
from .color_model import ColorModel
from .dual_index_composer import DualIndexComposer
from .lane_assembler import LaneAssembler
from .request_validator import RequestValidator

logger = logging.getLogger(__name__)


class DesignSearch:
    """Validate a request, prepare the pools and run the matching search."""

    def __init__(self, settings: Optional[SearchSettings] = None):
        self.settings = settings

    def find_solution(self, request: DesignRequest) -> Design:
        """
        Search for a design satisfying request.

        Args:
            request: Pools and search parameters

        Returns:
            Design with nb_samples / multiplexing_rate lanes

        Raises:
            InvalidInputError: If the request is invalid
            IncompatiblePoolTooSmallError: If too few chemistry-usable
                indexes remain to fill the lanes
            NoSolutionFoundError: If no design was found within max_trials
        """
        result = RequestValidator.validate(request)
        if not result.is_valid:
            raise InvalidInputError(result.errors)

        chemistry = get_chemistry(request.chemistry)
        settings = self.settings or get_search_settings()
        constraint = UniquenessConstraint.parse(request.constraint)

        pool_i7 = self.usable_indexes(request.pool_i7, chemistry)

        if request.is_dual:
            pool_i5 = self.usable_indexes(request.pool_i5, chemistry)
            self._check_pool_size(pool_i7, request, UniquenessConstraint.NONE, "i7")
            self._check_pool_size(pool_i5, request, UniquenessConstraint.NONE, "i5")
            self._log_dual_overrides(request, constraint)
            composer = DualIndexComposer(chemistry, settings)
            return composer.compose(
                pool_i7,
                pool_i5,
                multiplexing_rate=request.multiplexing_rate,
                nb_lanes=request.nb_lanes,
                max_trials=request.max_trials,
                seed=request.seed,
                workers=request.workers,
            )

        self._check_pool_size(pool_i7, request, constraint, "i7")
        assembler = LaneAssembler(chemistry, settings)
        return assembler.assemble(
            pool_i7,
            multiplexing_rate=request.multiplexing_rate,
            nb_lanes=request.nb_lanes,
            constraint=constraint,
            complete_lane=request.complete_lane,
            max_trials=request.max_trials,
            use_graph=request.select_comp_indexes,
            seed=request.seed,
            workers=request.workers,
        )

    @classmethod
    def usable_indexes(cls, pool: IndexPool, chemistry: Chemistry) -> list[Index]:
        """Indexes of pool that the chemistry can decode at all."""
        usable = []
        dropped = []
        for index in pool:
            if ColorModel.is_index_usable(index.sequence, chemistry):
                usable.append(index)
            else:
                dropped.append(index.id)
        if dropped:
            logger.warning(
                f"Removed {len(dropped)} {pool.label} index(es) incompatible with the "
                f"{chemistry.name} chemistry: {', '.join(dropped)}"
            )
        return usable

    @staticmethod
    def _check_pool_size(
        indexes: list[Index],
        request: DesignRequest,
        constraint: UniquenessConstraint,
        label: str,
    ) -> None:
        needed = request.multiplexing_rate
        if constraint is UniquenessConstraint.INDEX:
            needed = request.nb_samples
        if len(indexes) < needed:
            raise IncompatiblePoolTooSmallError(
                f"Only {len(indexes)} {label} index(es) are compatible with the chosen "
                f"chemistry but {needed} are needed."
            )

    @staticmethod
    def _log_dual_overrides(request: DesignRequest, constraint: UniquenessConstraint) -> None:
        overridden = []
        if constraint is not UniquenessConstraint.NONE:
            overridden.append(f"unicity constraint '{constraint.value}' -> 'none'")
        if not request.complete_lane:
            overridden.append("complete lanes -> True")
        if request.select_comp_indexes:
            overridden.append("select compatible indexes -> False")
        if overridden:
            logger.warning(f"Dual-indexing overrides: {'; '.join(overridden)}")
