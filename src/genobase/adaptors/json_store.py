"""
Adaptor provider backed by build output directories.

Each (species, assembly) key is served from <store_dir>/<species>/<assembly>/,
a directory holding the .json.gz files written by the build dispatcher.
Collections are loaded on first use and kept in memory until close().
"""

import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from ..config.settings import AdaptorStoreSettings
from ..core.exceptions import ConfigurationError
from ..core.types import AdaptorKey, EntityKind, Records
from ..serializers import read_records
from ..utils.logging import LoggerMixin
from .api import ADAPTOR_CONTRACTS, FeatureAdaptor
from .factory import AdaptorFactory


# Output file stems that differ from the entity kind name
COLLECTION_NAMES = {
    EntityKind.CONSERVED_REGION: "conservation",
    EntityKind.MUTATION: "cosmic",
}


class StoreConnection(LoggerMixin):
    """Lazy, thread-safe loader for the collections of one store directory."""

    def __init__(self, directory: Path, suffix: str):
        self.directory = directory
        self.suffix = suffix
        self._collections: Dict[str, Records] = {}
        self._lock = threading.Lock()

    def files_for(self, collection: str) -> List[Path]:
        """Return the single file of a collection, or its per-chromosome files."""
        single = self.directory / f"{collection}{self.suffix}"
        if single.is_file():
            return [single]
        return sorted(self.directory.glob(f"{collection}_chr*{self.suffix}"))

    def records(self, collection: str) -> Records:
        with self._lock:
            if collection not in self._collections:
                loaded: Records = []
                for path in self.files_for(collection):
                    loaded.extend(read_records(path))
                self.logger.debug(f"Loaded {len(loaded)} {collection} records from {self.directory}")
                self._collections[collection] = loaded
            return self._collections[collection]

    def close(self) -> None:
        with self._lock:
            self._collections.clear()


def _matches(value: Any, wanted: set) -> bool:
    if isinstance(value, list):
        return any(str(v) in wanted for v in value)
    return value is not None and str(value) in wanted


class JsonFeatureAdaptor(FeatureAdaptor):
    """FeatureAdaptor over one in-memory collection."""

    def __init__(self, connection: StoreConnection, collection: str, id_fields: Iterable[str] = ("id",)):
        self.connection = connection
        self.collection = collection
        self.id_fields = tuple(id_fields)

    @property
    def records(self) -> Records:
        return self.connection.records(self.collection)

    def get_all(self, limit: Optional[int] = None) -> Records:
        records = self.records
        return list(records if limit is None else records[:limit])

    def get_by_field(self, field: str, values: Iterable[str]) -> Records:
        wanted = {str(v) for v in values}
        return [r for r in self.records if _matches(r.get(field), wanted)]

    def get_by_id(self, ids: Iterable[str]) -> Records:
        wanted = {str(i) for i in ids}
        return [r for r in self.records if any(_matches(r.get(f), wanted) for f in self.id_fields)]

    def get_by_region(self, chromosome: str, start: int, end: int) -> Records:
        found = []
        for r in self.records:
            name = r.get("chromosome", r.get("sequenceName"))
            if name is None or str(name) != str(chromosome):
                continue
            if r.get("start") is None or r.get("end") is None:
                continue
            if int(r["start"]) <= end and int(r["end"]) >= start:
                found.append(r)
        return found

    def count(self) -> int:
        return len(self.records)


# One concrete class per entity contract, e.g. JsonGeneAdaptor
JSON_ADAPTOR_TYPES: Dict[EntityKind, Type[JsonFeatureAdaptor]] = {
    kind: type(f"Json{contract.__name__}", (JsonFeatureAdaptor, contract), {})
    for kind, contract in ADAPTOR_CONTRACTS.items()
}


class JsonStoreAdaptorFactory(AdaptorFactory):
    """Serves adaptors from JSON-lines build output on the local file system."""

    def _configure(self, config: Union[AdaptorStoreSettings, Dict[str, Any]]) -> AdaptorStoreSettings:
        if isinstance(config, AdaptorStoreSettings):
            return config
        if isinstance(config, dict):
            return AdaptorStoreSettings(**config)
        raise ConfigurationError(
            f"Unsupported adaptor store configuration: {type(config).__name__}",
            config_key="store",
        )

    def store_dir_for(self, key: AdaptorKey) -> Path:
        return Path(self.configuration.store_dir) / key.species / key.assembly

    def _connect(self, key: AdaptorKey) -> StoreConnection:
        directory = self.store_dir_for(key)
        if not directory.is_dir():
            raise ConfigurationError(
                f"Store directory {directory} doesn't exist",
                config_key="store_dir",
                config_value=directory,
            )
        return StoreConnection(directory, self.configuration.file_suffix)

    def _disconnect(self, key: AdaptorKey, handle: StoreConnection) -> None:
        handle.close()

    def _create_adaptor(self, kind: EntityKind, key: AdaptorKey, handle: StoreConnection) -> FeatureAdaptor:
        collection = COLLECTION_NAMES.get(kind, kind.value)
        return JSON_ADAPTOR_TYPES[kind](handle, collection, self.configuration.id_fields)
