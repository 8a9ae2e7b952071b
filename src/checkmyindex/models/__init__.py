"""Data models for index design."""

from .chemistry import Chemistry, CompatibilityRule
from .design import Design, DesignRow, Lane
from .index import Combination, Index, IndexPool, IndexType
from .request import DesignRequest
from .search import (
    SearchContext,
    SearchSettings,
    TrialSearch,
    TrialState,
    UniquenessConstraint,
    UniquenessLedger,
)

__all__ = [
    "Chemistry",
    "CompatibilityRule",
    "Combination",
    "Design",
    "DesignRequest",
    "DesignRow",
    "Index",
    "IndexPool",
    "IndexType",
    "Lane",
    "SearchContext",
    "SearchSettings",
    "TrialSearch",
    "TrialState",
    "UniquenessConstraint",
    "UniquenessLedger",
]
