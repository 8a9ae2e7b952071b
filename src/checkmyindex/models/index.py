"""Index-related data models."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from ..exceptions import InvalidInputError

_VALID_DNA_RE = re.compile(r"^[ACGT]+$")


class IndexType(Enum):
    """Type of sequencing index."""

    I7 = "i7"  # Index1
    I5 = "i5"  # Index2


@dataclass(frozen=True)
class Index:
    """Single index sequence (i7 or i5)."""

    id: str
    sequence: str
    index_type: IndexType = IndexType.I7

    def __post_init__(self):
        # Normalize sequence to uppercase
        object.__setattr__(self, "sequence", self.sequence.strip().upper())
        if not self.id or not self.id.strip():
            raise InvalidInputError("Index id must not be empty.")
        if not _VALID_DNA_RE.match(self.sequence):
            invalid = set(self.sequence) - set("ACGT")
            raise InvalidInputError(
                f"Index '{self.id}' sequence '{self.sequence}' contains invalid "
                f"characters: {sorted(invalid) or 'empty sequence'}. "
                f"Only A, C, G, T are allowed."
            )

    @property
    def length(self) -> int:
        """Length of the index sequence."""
        return len(self.sequence)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sequence": self.sequence,
            "index_type": self.index_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Index":
        return cls(
            id=data["id"],
            sequence=data["sequence"],
            index_type=IndexType(data.get("index_type", IndexType.I7.value)),
        )


@dataclass
class IndexPool:
    """Catalog of available indexes for one index read.

    Indexes keep their input order, are unique by id and share one sequence
    length. Violations raise InvalidInputError on construction.
    """

    indexes: list[Index] = field(default_factory=list)
    index_type: IndexType = IndexType.I7
    name: str = ""

    def __post_init__(self):
        errors = []
        if not self.indexes:
            errors.append(f"{self.label} index pool is empty.")

        seen: set[str] = set()
        for index in self.indexes:
            if index.id in seen:
                errors.append(f"Duplicate index id in {self.label} pool: '{index.id}'.")
            seen.add(index.id)

        lengths = sorted({index.length for index in self.indexes})
        if len(lengths) > 1:
            errors.append(
                f"{self.label} index sequences must all have the same length "
                f"(found lengths {', '.join(str(n) for n in lengths)})."
            )

        if errors:
            raise InvalidInputError(errors)

        self._by_id = {index.id: index for index in self.indexes}

    @property
    def label(self) -> str:
        return self.name or self.index_type.value

    @property
    def sequence_length(self) -> int:
        return self.indexes[0].length if self.indexes else 0

    @property
    def ids(self) -> list[str]:
        return [index.id for index in self.indexes]

    def __len__(self) -> int:
        return len(self.indexes)

    def __iter__(self) -> Iterator[Index]:
        return iter(self.indexes)

    def __contains__(self, index_id: str) -> bool:
        return index_id in self._by_id

    def get(self, index_id: str) -> Optional[Index]:
        return self._by_id.get(index_id)

    def without(self, index_ids: Iterable[str]) -> list[Index]:
        """Indexes of the pool not in index_ids, in pool order."""
        excluded = set(index_ids)
        return [index for index in self.indexes if index.id not in excluded]

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[str, str]],
        index_type: IndexType = IndexType.I7,
        name: str = "",
    ) -> "IndexPool":
        """Build a pool from (id, sequence) pairs."""
        return cls(
            indexes=[Index(id=i, sequence=s, index_type=index_type) for i, s in pairs],
            index_type=index_type,
            name=name,
        )


@dataclass(frozen=True)
class Combination:
    """Unordered set of distinct indexes drawn from one pool.

    Members are stored sorted by id so equality and hashing are by content.
    Use Combination.of() to build one from any iterable.
    """

    indexes: tuple[Index, ...]

    @classmethod
    def of(cls, indexes: Iterable[Index]) -> "Combination":
        members = tuple(sorted(indexes, key=lambda index: index.id))
        ids = [index.id for index in members]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Combination members must be distinct: {ids}")
        return cls(indexes=members)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(index.id for index in self.indexes)

    @property
    def sequences(self) -> list[str]:
        return [index.sequence for index in self.indexes]

    def extended(self, extra: Iterable[Index]) -> "Combination":
        """New combination with extra indexes added."""
        return Combination.of(self.indexes + tuple(extra))

    def __len__(self) -> int:
        return len(self.indexes)

    def __iter__(self) -> Iterator[Index]:
        return iter(self.indexes)
