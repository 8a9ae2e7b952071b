"""Compose dual-index (i7 + i5) designs from two independent pools."""

import logging
import random
from typing import Iterable, Optional

from ..models.chemistry import Chemistry
from ..models.design import Design, Lane
from ..models.index import Index
from ..models.search import SearchSettings, UniquenessConstraint
from .lane_assembler import LaneAssembler

logger = logging.getLogger(__name__)


class DualIndexComposer:
    """Pair lanes of an i7 design with lanes of an i5 design.

    The sequencer decodes the i7 and i5 reads separately, so each read only
    has to be compatible on its own. Both pools are searched at the full
    multiplexing rate, without uniqueness constraint or compatibility graph.
    """

    def __init__(self, chemistry: Chemistry, settings: Optional[SearchSettings] = None):
        self.chemistry = chemistry
        self.assembler = LaneAssembler(chemistry, settings)

    def compose(
        self,
        pool_i7: Iterable[Index],
        pool_i5: Iterable[Index],
        multiplexing_rate: int,
        nb_lanes: int,
        max_trials: int = 10,
        seed: Optional[int] = None,
        workers: int = 1,
    ) -> Design:
        """
        Build nb_lanes lanes of multiplexing_rate (i7, i5) pairs.

        Lane i of the i7 design is paired with lane i of the i5 design,
        position by position.

        Raises:
            NoSolutionFoundError: If either pool yields no design
        """
        rng = random.Random(seed)
        designs = []
        for label, pool in (("i7", pool_i7), ("i5", pool_i5)):
            logger.info(f"Searching {label} indexes")
            designs.append(
                self.assembler.assemble(
                    pool,
                    multiplexing_rate=multiplexing_rate,
                    nb_lanes=nb_lanes,
                    constraint=UniquenessConstraint.NONE,
                    complete_lane=True,
                    max_trials=max_trials,
                    use_graph=False,
                    seed=rng.getrandbits(64),
                    workers=workers,
                )
            )

        design_i7, design_i5 = designs
        lanes = [
            Lane(number=lane7.number, indexes=lane7.indexes, indexes2=lane5.indexes)
            for lane7, lane5 in zip(design_i7.lanes, design_i5.lanes)
        ]
        return Design(
            chemistry=self.chemistry,
            multiplexing_rate=multiplexing_rate,
            lanes=lanes,
        )
