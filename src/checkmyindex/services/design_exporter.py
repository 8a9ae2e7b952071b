"""Export sequencing designs as tab-delimited tables."""

import csv
from io import StringIO
from pathlib import Path

from ..models.design import Design, DesignRow

SINGLE_COLUMNS = ["sample", "pool", "id", "sequence", "color"]
DUAL_COLUMNS = SINGLE_COLUMNS + ["id2", "sequence2", "color2"]


class DesignExporter:
    """Write a design with one row per sample."""

    @classmethod
    def columns(cls, design: Design) -> list[str]:
        return DUAL_COLUMNS if design.is_dual else SINGLE_COLUMNS

    @classmethod
    def to_rows(cls, design: Design) -> list[list[str]]:
        """Table body as lists of strings, in the order of columns()."""
        return [cls._row_values(row, design.is_dual) for row in design.rows()]

    @classmethod
    def to_tsv(cls, design: Design) -> str:
        """
        Export a design to tab-delimited text with a header line.

        Args:
            design: Design to export

        Returns:
            Table content as string
        """
        output = StringIO()
        writer = csv.writer(output, delimiter="\t", lineterminator="\n")
        writer.writerow(cls.columns(design))
        writer.writerows(cls.to_rows(design))
        return output.getvalue()

    @classmethod
    def write(cls, design: Design, path: Path) -> Path:
        path = Path(path)
        path.write_text(cls.to_tsv(design))
        return path

    @staticmethod
    def _row_values(row: DesignRow, dual: bool) -> list[str]:
        values = [str(row.sample), str(row.lane), row.index_id, row.sequence, row.color]
        if dual:
            values += [row.index2_id or "", row.sequence2 or "", row.color2 or ""]
        return values
