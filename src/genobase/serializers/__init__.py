"""Record writers for build output."""

from .json_serializer import JsonSerializer, RecordSerializer, read_records

__all__ = ["JsonSerializer", "RecordSerializer", "read_records"]
