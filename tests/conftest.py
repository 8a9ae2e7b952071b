"""Pytest fixtures for checkmyindex tests."""

from itertools import islice, product

import pytest

from checkmyindex.data.chemistries import get_chemistry
from checkmyindex.models.index import Index, IndexPool, IndexType


def _sequences(bases: str, count: int, length: int = 8) -> list[str]:
    """First count sequences made only of bases, in lexicographic order."""
    return ["".join(p) for p in islice(product(bases, repeat=length), count)]


@pytest.fixture
def make_pool():
    """Factory for pools of "red" (A/C only) and "green" (T/G only) indexes.

    Under the four-channel chemistry a set is compatible exactly when it
    holds at least one red and one green index.
    """

    def _make_pool(
        n_red: int,
        n_green: int,
        index_type: IndexType = IndexType.I7,
        prefix: str = "idx",
        length: int = 8,
    ) -> IndexPool:
        sequences = _sequences("AC", n_red, length) + _sequences("TG", n_green, length)
        return IndexPool(
            indexes=[
                Index(id=f"{prefix}{i + 1:02d}", sequence=seq, index_type=index_type)
                for i, seq in enumerate(sequences)
            ],
            index_type=index_type,
        )

    return _make_pool


@pytest.fixture
def four_channel():
    return get_chemistry(4)


@pytest.fixture
def two_channel():
    return get_chemistry(2)


@pytest.fixture
def one_channel():
    return get_chemistry(1)


@pytest.fixture
def truseq_i7_pool():
    """TruSeq HT i7 (D7xx) indexes."""
    return IndexPool.from_pairs(
        [
            ("D701", "ATTACTCG"),
            ("D702", "TCCGGAGA"),
            ("D703", "CGCTCATT"),
            ("D704", "GAGATTCC"),
            ("D705", "ATTCAGAA"),
            ("D706", "GAATTCGT"),
            ("D707", "CTGAAGCT"),
            ("D708", "TAATGCGC"),
            ("D709", "CGGCTATG"),
            ("D710", "TCCGCGAA"),
            ("D711", "TCTCGCGC"),
            ("D712", "AGCGATAG"),
        ]
    )
