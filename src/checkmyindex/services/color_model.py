"""Color compatibility of index sequences under a sequencing chemistry.

A set of indexes sequenced together is decodable when, at every index cycle,
the bases present emit the colors the chemistry needs:

- four-channel: A/C are red, G/T are green; each position needs red and green
- two-channel: A is orange, C red, T green, G dark; each position needs a color,
  and an index starting with GG is never decodable
- one-channel: G is dark; each position needs an A, C or T

Adding indexes to a compatible set can only add colors, so every superset of
a compatible set (of usable indexes) is compatible as well.
"""

from typing import Iterable

from ..models.chemistry import Chemistry, CompatibilityRule


class ColorModel:
    """Compatibility checks for sets of index sequences."""

    @classmethod
    def is_index_usable(cls, sequence: str, chemistry: Chemistry) -> bool:
        """Whether a single index may appear in any lane at all."""
        return not any(sequence.startswith(p) for p in chemistry.forbidden_prefixes)

    @classmethod
    def position_colors(
        cls, sequences: Iterable[str], chemistry: Chemistry
    ) -> list[frozenset[str]]:
        """
        Colors emitted at each position by a set of sequences.

        Args:
            sequences: Index sequences of equal length
            chemistry: Chemistry giving the base colors

        Returns:
            One set of colors per position (empty list for no sequences)
        """
        sequences = list(sequences)
        if not sequences:
            return []

        base_colors = chemistry.base_colors
        length = min(len(seq) for seq in sequences)
        positions = []
        for pos in range(length):
            colors: set[str] = set()
            for seq in sequences:
                colors |= base_colors.get(seq[pos], frozenset())
            positions.append(frozenset(colors))
        return positions

    @classmethod
    def is_compatible(cls, sequences: Iterable[str], chemistry: Chemistry) -> bool:
        """
        Check whether a set of index sequences can be decoded together.

        Runs in time linear in number of sequences times sequence length.

        Args:
            sequences: Index sequences of equal length
            chemistry: Chemistry to check against

        Returns:
            True if every position passes the chemistry rule and no sequence
            starts with a forbidden prefix
        """
        sequences = list(sequences)
        if not sequences:
            return False
        if not all(cls.is_index_usable(seq, chemistry) for seq in sequences):
            return False

        required = chemistry.colors
        for colors in cls.position_colors(sequences, chemistry):
            if chemistry.rule is CompatibilityRule.ALL_COLORS:
                if not required <= colors:
                    return False
            elif not colors:
                return False
        return True

    @classmethod
    def color_profile(cls, sequence: str, chemistry: Chemistry) -> str:
        """Color symbols of a sequence, e.g. "RRGG" for ACGT in four-channel."""
        return chemistry.color_profile(sequence)
