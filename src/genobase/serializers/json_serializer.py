"""
Gzip-compressed JSON-lines record writer.

A serializer is bound to an output directory. Single-entity builds pass a
file name at construction and call serialize(record); builds that split
their output (per chromosome or per source file) call
serialize(record, file_name) instead.
"""

import gzip
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, IO, Optional

from ..core.types import PathLike
from ..utils.logging import LoggerMixin


class RecordSerializer(ABC):
    """Contract for writers receiving normalized records."""

    @abstractmethod
    def serialize(self, record: Any, file_name: Optional[str] = None) -> None:
        """Write one record, to the default entity file or to file_name."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release every open file."""


class JsonSerializer(LoggerMixin, RecordSerializer):
    """Writes one JSON object per line into <output_dir>/<name>.json.gz files."""

    SUFFIX = ".json.gz"

    def __init__(self, output_dir: PathLike, file_name: Optional[str] = None, flush_size: int = 1000):
        self.output_dir = Path(output_dir)
        self.file_name = file_name
        self.flush_size = flush_size
        self._handles: Dict[str, IO[str]] = {}
        self._pending: Dict[str, int] = {}
        self.record_counts: Dict[str, int] = {}

    def path_for(self, file_name: str) -> Path:
        """Return the output path a file name is written to."""
        return self.output_dir / f"{file_name}{self.SUFFIX}"

    def _handle(self, file_name: str) -> IO[str]:
        handle = self._handles.get(file_name)
        if handle is None:
            path = self.path_for(file_name)
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = gzip.open(path, "wt", encoding="utf-8")
            self._handles[file_name] = handle
            self._pending[file_name] = 0
            self.record_counts[file_name] = 0
            self.logger.debug(f"Opened {path}")
        return handle

    def serialize(self, record: Any, file_name: Optional[str] = None) -> None:
        name = file_name or self.file_name
        if name is None:
            raise ValueError("No file name given and serializer has no default file name")

        if hasattr(record, "model_dump"):
            record = record.model_dump()

        handle = self._handle(name)
        handle.write(json.dumps(record, default=str))
        handle.write("\n")
        self.record_counts[name] += 1
        self._pending[name] += 1
        if self._pending[name] >= self.flush_size:
            handle.flush()
            self._pending[name] = 0

    def close(self) -> None:
        for name, handle in self._handles.items():
            handle.close()
            self.logger.info(f"Wrote {self.record_counts[name]} records to {self.path_for(name)}")
        self._handles.clear()
        self._pending.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def read_records(path: PathLike):
    """Yield the records of a JSON-lines file written by JsonSerializer."""
    with gzip.open(path, "rt", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line:
                yield json.loads(line)
