"""Summary: JSON snapshot persistence for the statistics store.

Importance: Keeps learned statistics across restarts in a compact file.
Alternatives: Persist counts in SQLite and update rows incrementally.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from folderpilot.errors import SnapshotFormatError, SnapshotLoadError, SnapshotSaveError
from folderpilot.models import CategoryCountRecord, StoreSnapshot, WordFrequencyRecord
from folderpilot.storage.stats_store import StatisticsStore


logger = logging.getLogger(__name__)


class _MessageRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account: int
    category: str = Field(alias="class")
    count: int = Field(ge=0)


class _WordRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account: int
    word: str
    category: str = Field(alias="class")
    frequency: int = Field(ge=0)


class _SnapshotDocument(BaseModel):
    """Summary: Wire layout of the snapshot file.

    Importance: Validates every record before it reaches the store.
    Alternatives: Index raw dictionaries and trust the file contents.
    """

    messages: list[_MessageRecord]
    words: list[_WordRecord]


def encode_snapshot(snapshot: StoreSnapshot) -> dict[str, Any]:
    """Summary: Convert a store snapshot into its JSON-ready layout.

    Importance: Produces the two flat record lists of the snapshot file.
    Alternatives: Write nested per-account objects.
    """

    document = _SnapshotDocument(
        messages=[
            _MessageRecord(account=record.account, category=record.category, count=record.count)
            for record in snapshot.messages
        ],
        words=[
            _WordRecord(
                account=record.account,
                word=record.word,
                category=record.category,
                frequency=record.frequency,
            )
            for record in snapshot.words
        ],
    )
    return document.model_dump(by_alias=True)


def decode_snapshot(payload: Any) -> StoreSnapshot:
    """Summary: Validate and convert a JSON payload into a store snapshot.

    Importance: Rejects malformed files with a single, explicit error.
    Alternatives: Skip invalid records and load the rest.
    """

    try:
        document = _SnapshotDocument.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotFormatError(f"Invalid classifier snapshot: {exc}") from exc
    return StoreSnapshot(
        messages=[
            CategoryCountRecord(account=record.account, category=record.category, count=record.count)
            for record in document.messages
        ],
        words=[
            WordFrequencyRecord(
                account=record.account,
                word=record.word,
                category=record.category,
                frequency=record.frequency,
            )
            for record in document.words
        ],
    )


class SnapshotFile:
    """Summary: Loads and saves the statistics store from one JSON file.

    Importance: Reads the file at most once and writes only after changes.
    Alternatives: Reload and rewrite the file on every classification.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, store: StatisticsStore) -> bool:
        """Summary: Replace the store contents with the persisted snapshot.

        Importance: Lazily restores learned statistics on first use.
        Alternatives: Load eagerly at application startup.

        Returns True when this call performed the load. A missing file leaves
        the store empty. On failure the store is left empty and the load may be
        retried.
        """

        with store.transaction():
            if self._loaded:
                return False
            store.clear()
            store.mark_clean()
            if self._path.exists():
                try:
                    payload = json.loads(self._path.read_text(encoding="utf-8"))
                    snapshot = decode_snapshot(payload)
                except (OSError, ValueError, SnapshotFormatError) as exc:
                    raise SnapshotLoadError(f"Cannot load classifier data from {self._path}: {exc}") from exc
                store.restore(snapshot)
            self._loaded = True
        logger.info("Classifier data loaded from %s.", self._path)
        return True

    def reset(self, store: StatisticsStore) -> None:
        """Summary: Empty the store and treat it as the loaded state.

        Importance: A later lazy load must not bring cleared statistics back.
        Alternatives: Delete the snapshot file directly.
        """

        with store.transaction():
            store.clear()
            self._loaded = True

    def save(self, store: StatisticsStore) -> bool:
        """Summary: Write the store to disk when it changed since the last save.

        Importance: Avoids redundant writes of a potentially large file.
        Alternatives: Save unconditionally on a timer.
        """

        with store.transaction():
            if not store.dirty:
                return False
            text = json.dumps(encode_snapshot(store.snapshot()), indent=2, ensure_ascii=False)
            try:
                _write_atomic(self._path, text)
            except (OSError, ValueError) as exc:
                raise SnapshotSaveError(f"Cannot save classifier data to {self._path}: {exc}") from exc
            store.mark_clean()
        logger.info("Classifier data saved to %s.", self._path)
        return True


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
            temp_file.write(text)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
