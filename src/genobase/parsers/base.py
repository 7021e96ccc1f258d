"""
Base classes for format-specific parsers.

Every parser drains its input source and hands normalized records to a
RecordSerializer. disconnect() releases the serializer and any other held
resources; the build dispatcher calls it exactly once after parse().
"""

import gzip
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Iterable, List, Optional

from ..core.exceptions import ParseError
from ..core.types import PathLike
from ..serializers import RecordSerializer
from ..utils.logging import LoggerMixin


def open_text(path: PathLike) -> IO[str]:
    """Open a plain or gzip-compressed text file for reading."""
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def list_input_files(directory: PathLike, suffixes: Iterable[str]) -> List[Path]:
    """Return the sorted files of a directory whose name ends with any suffix."""
    suffixes = tuple(suffixes)
    return sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and p.name.endswith(suffixes)
    )


class RecordParser(LoggerMixin, ABC):
    """Abstract base class for all build parsers."""

    def __init__(self, serializer: RecordSerializer):
        self.serializer = serializer
        self.records_written = 0
        self._disconnected = False

    @abstractmethod
    def parse(self) -> None:
        """Transform the whole input source into serialized records."""

    def emit(self, record, file_name: Optional[str] = None) -> None:
        """Hand one normalized record to the serializer."""
        self.serializer.serialize(record, file_name)
        self.records_written += 1

    def disconnect(self) -> None:
        """Release the serializer. Safe to call more than once."""
        if self._disconnected:
            return
        self._disconnected = True
        self.serializer.close()
        self.logger.debug(f"{self.__class__.__name__} disconnected after {self.records_written} records")

    def require_columns(self, columns: Iterable[str], required: Iterable[str], source: PathLike) -> None:
        """Raise ParseError if any required column is missing from a tabular input."""
        missing = [c for c in required if c not in set(columns)]
        if missing:
            raise ParseError(
                f"Missing columns {missing} in {source}",
                source=str(source),
            )
