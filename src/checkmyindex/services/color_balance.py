"""Color balance analysis of a finished design.

Reports, for each lane and index read, how many bases of each kind and of
each color are seen at every cycle, flagging the positions that break the
chemistry rule.
"""

from ..models.chemistry import Chemistry
from ..models.color_balance import (
    ColorBalanceStatus,
    IndexColorBalance,
    LaneColorBalance,
    PositionColorBalance,
)
from ..models.design import Design, Lane
from .color_model import ColorModel


class ColorBalanceAnalyzer:
    """Per-position color counts for every lane of a design."""

    @classmethod
    def analyze(cls, design: Design) -> list[LaneColorBalance]:
        """
        Calculate color balance for index positions per lane.

        Args:
            design: Design to analyze

        Returns:
            One LaneColorBalance per lane, in lane order
        """
        return [cls._analyze_lane(lane, design.chemistry) for lane in design.lanes]

    @classmethod
    def _analyze_lane(cls, lane: Lane, chemistry: Chemistry) -> LaneColorBalance:
        i7_sequences = [index.sequence for index in lane.indexes]
        i5_sequences = [index.sequence for index in lane.indexes2 or ()]

        return LaneColorBalance(
            lane=lane.number,
            sample_count=lane.size,
            i7_balance=cls.index_color_balance("i7", i7_sequences, chemistry),
            i5_balance=(
                cls.index_color_balance("i5", i5_sequences, chemistry)
                if i5_sequences
                else None
            ),
        )

    @classmethod
    def index_color_balance(
        cls, index_type: str, sequences: list[str], chemistry: Chemistry
    ) -> IndexColorBalance:
        """
        Calculate color balance for an index type across all sequences.

        Args:
            index_type: "i7" or "i5"
            sequences: Index sequences of one lane
            chemistry: Chemistry giving the base colors

        Returns:
            IndexColorBalance with per-position base and color counts
        """
        if not sequences:
            return IndexColorBalance(index_type=index_type, positions=[])

        positions = []
        for pos in range(min(len(seq) for seq in sequences)):
            column = [seq[pos] for seq in sequences]
            pos_balance = PositionColorBalance(
                position=pos + 1,
                a_count=column.count("A"),
                c_count=column.count("C"),
                g_count=column.count("G"),
                t_count=column.count("T"),
                color_counts={
                    color: sum(1 for base in column if color in chemistry.base_colors[base])
                    for color in sorted(chemistry.colors)
                },
            )
            # A single column is checked like a set of one-base sequences
            if not ColorModel.is_compatible(column, chemistry):
                pos_balance.status = ColorBalanceStatus.ERROR
            positions.append(pos_balance)

        return IndexColorBalance(index_type=index_type, positions=positions)
