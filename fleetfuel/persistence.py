""" Persistence boundary: adapters that load/save one collection under a key, and the Repository that moves the
RecordStore through them.

An adapter only deals in plain JSON-compatible lists of dicts; it knows nothing about the models. The Repository turns
stored dicts back into pydantic models (ISO date strings become date/datetime objects there) and, on commit, saves each
collection the engines marked dirty exactly once. Engines never call an adapter themselves. """

from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Type

from pydantic import BaseModel, TypeAdapter

from .config import Settings
from .models import DailyLogEntry, FuelEntry, Supplier, Vehicle
from .store import COLLECTIONS, DAILY_LOGS, FUEL_ENTRIES, SUPPLIERS, VEHICLES, RecordStore

logger = logging.getLogger("fleetfuel.persistence")

COLLECTION_MODELS: Dict[str, Type[BaseModel]] = {
    VEHICLES: Vehicle,
    FUEL_ENTRIES: FuelEntry,
    DAILY_LOGS: DailyLogEntry,
    SUPPLIERS: Supplier,
}


class PersistenceAdapter(Protocol):
    def load(self, key: str) -> Optional[List[Dict[str, Any]]]: ...

    def save(self, key: str, records: List[Dict[str, Any]]) -> None: ...


class MemoryAdapter:
    """Keeps each collection as JSON text, so a load goes through the same parsing as the file adapter."""

    def __init__(self, initial: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._blobs: Dict[str, str] = {}
        for key, records in (initial or {}).items():
            self.save(key, records)

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        blob = self._blobs.get(key)
        return None if blob is None else json.loads(blob)

    def save(self, key: str, records: List[Dict[str, Any]]) -> None:
        self._blobs[key] = json.dumps(records)

    def keys(self) -> List[str]:
        return sorted(self._blobs)


class JsonFileAdapter:
    """One `<key>.json` file per collection inside `directory`."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[List[Dict[str, Any]]]:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open(encoding="utf-8") as f:
            return json.load(f)

    def save(self, key: str, records: List[Dict[str, Any]]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp, self._path(key))         # readers see the old file or the new one, never half of it
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise


def make_adapter(settings: Settings) -> PersistenceAdapter:
    if settings.storage_backend == "memory":
        return MemoryAdapter()
    return JsonFileAdapter(settings.data_dir)


def serialize(records: Iterable[BaseModel]) -> List[Dict[str, Any]]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


def deserialize(key: str, raw: Optional[List[Dict[str, Any]]]) -> List[BaseModel]:
    if not raw:
        return []
    model = COLLECTION_MODELS[key]
    return TypeAdapter(List[model]).validate_python(raw)


class Repository:
    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    def load(self) -> RecordStore:
        loaded = {key: deserialize(key, self.adapter.load(key)) for key in COLLECTIONS}
        store = RecordStore(
            vehicles=loaded[VEHICLES],
            fuel_entries=loaded[FUEL_ENTRIES],
            daily_logs=loaded[DAILY_LOGS],
            suppliers=loaded[SUPPLIERS],
        )
        logger.info(
            "Loaded %s vehicles, %s fuel entries, %s daily logs, %s suppliers",
            len(store.vehicles), len(store.fuel_entries), len(store.daily_logs), len(store.suppliers),
        )
        return store

    def commit(self, store: RecordStore) -> List[str]:
        """Save every dirty collection once and clear the marks; returns the keys written."""
        saved: List[str] = []
        for key in COLLECTIONS:
            if key not in store.dirty:
                continue
            self.adapter.save(key, serialize(store.collection(key).values()))
            saved.append(key)
        store.dirty.clear()
        if saved:
            logger.debug("Saved collections: %s", ", ".join(saved))
        return saved

    def save_all(self, store: RecordStore) -> List[str]:
        store.dirty.update(COLLECTIONS)
        return self.commit(store)
