"""Parse two-column index tables."""

import csv
from io import StringIO
from pathlib import Path
from typing import Optional

from ..exceptions import InvalidInputError
from ..models.index import Index, IndexPool, IndexType


class IndexTableParser:
    """Parse tab-delimited index files without header.

    Expected format (one index per line):
        D701<tab>ATTACTCG
        D702<tab>TCCGGAGA
    """

    @classmethod
    def parse(
        cls,
        file_path: Path,
        index_type: IndexType = IndexType.I7,
        file_content: Optional[str] = None,
    ) -> IndexPool:
        """
        Parse an index file.

        Args:
            file_path: Path to the file (also used to name the pool)
            index_type: i7 or i5
            file_content: Optional file content string. If not provided, reads from file_path.

        Returns:
            IndexPool with the parsed indexes

        Raises:
            InvalidInputError: If the file is missing or malformed
        """
        file_path = Path(file_path)
        if file_content is None:
            if not file_path.exists():
                raise InvalidInputError(f"{file_path} does not exist.")
            file_content = file_path.read_text()
        return cls.parse_content(file_content, index_type, name=file_path.name)

    @classmethod
    def parse_content(
        cls,
        content: str,
        index_type: IndexType = IndexType.I7,
        name: str = "",
    ) -> IndexPool:
        """
        Parse index table content.

        Blank lines are skipped and surrounding whitespace is stripped.
        Sequences are uppercased.
        """
        errors = []
        indexes = []
        reader = csv.reader(StringIO(content), delimiter="\t")
        for line_number, row in enumerate(reader, start=1):
            fields = [f.strip() for f in row if f.strip()]
            if not fields:
                continue
            if len(fields) != 2:
                errors.append(
                    f"Line {line_number}: expected 2 tab-separated columns "
                    f"(id, sequence), found {len(fields)}."
                )
                continue
            index_id, sequence = fields
            try:
                indexes.append(Index(id=index_id, sequence=sequence, index_type=index_type))
            except InvalidInputError as e:
                errors.extend(f"Line {line_number}: {error}" for error in e.errors)

        if errors:
            raise InvalidInputError(errors)
        return IndexPool(indexes=indexes, index_type=index_type, name=name)
