"""Validate design requests before any search starts."""

from dataclasses import dataclass, field

from ..data.chemistries import get_chemistry_codes
from ..exceptions import InvalidInputError
from ..models.chemistry import Chemistry
from ..models.request import DesignRequest
from ..models.search import UniquenessConstraint


@dataclass
class RequestValidationResult:
    """Result of validating a design request."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)


class RequestValidator:
    """Check sizes, enums and budgets of a DesignRequest."""

    @classmethod
    def validate(cls, request: DesignRequest) -> RequestValidationResult:
        """
        Validate a design request.

        Pools are already consistent (unique ids, equal lengths) since
        IndexPool checks itself on construction.

        Args:
            request: Request to validate

        Returns:
            RequestValidationResult listing every problem found
        """
        result = RequestValidationResult()

        cls._validate_sizes(request, result)
        cls._validate_options(request, result)

        return result

    @classmethod
    def _validate_sizes(cls, request: DesignRequest, result: RequestValidationResult) -> None:
        nb_samples = request.nb_samples
        rate = request.multiplexing_rate

        if not _is_int(nb_samples) or nb_samples <= 1:
            result.add_error("Number of samples must be an integer greater than 1.")
        if not _is_int(rate) or rate < 1:
            result.add_error("Multiplexing rate must be a positive integer.")
            return
        if _is_int(nb_samples) and nb_samples % rate != 0:
            result.add_error("Number of samples must be a multiple of the multiplexing rate.")

        pools = [("i7", request.pool_i7)]
        if request.pool_i5 is not None:
            pools.append(("i5", request.pool_i5))
        for label, pool in pools:
            if rate > len(pool):
                result.add_error(
                    f"Multiplexing rate ({rate}) can't be higher than the number of "
                    f"input {label} indexes ({len(pool)})."
                )

        if (
            not request.is_dual
            and _parse_constraint(request.constraint) is UniquenessConstraint.INDEX
            and _is_int(nb_samples)
            and nb_samples > len(request.pool_i7)
        ):
            result.add_error(
                f"Not enough indexes ({len(request.pool_i7)}) to use each index only "
                f"once for {nb_samples} samples."
            )

    @classmethod
    def _validate_options(cls, request: DesignRequest, result: RequestValidationResult) -> None:
        chemistry = request.chemistry
        codes = get_chemistry_codes()
        if not isinstance(chemistry, Chemistry) and str(chemistry) not in {str(c) for c in codes}:
            result.add_error(
                f"Chemistry must be equal to {', '.join(str(c) for c in codes)} (got '{chemistry}')."
            )

        if _parse_constraint(request.constraint) is None:
            result.add_error(
                f"Unicity constraint must be equal to 'none', 'lane' or 'index' "
                f"(got '{request.constraint}')."
            )

        for name in ("complete_lane", "select_comp_indexes"):
            if not isinstance(getattr(request, name), bool):
                result.add_error(f"{name} parameter must be True or False.")

        if not _is_int(request.max_trials) or request.max_trials < 1:
            result.add_error("Number of trials must be an integer greater than 0.")
        if not _is_int(request.workers) or request.workers < 1:
            result.add_error("Number of workers must be an integer greater than 0.")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_constraint(value):
    try:
        return UniquenessConstraint.parse(value)
    except InvalidInputError:
        return None
