"""Attempt persistence.

The engine only needs something with ``save_attempt``; the JSON-lines store
here is the default collaborator used by the command line.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from .errors import StorageError
from .reporter import AttemptRecord

__all__ = [
    "AttemptSink",
    "JsonlAttemptStore",
]

_LOGGER = logging.getLogger(__name__)


class AttemptSink(Protocol):
    """Anything that accepts finished attempts."""

    def save_attempt(self, record: AttemptRecord) -> object:
        ...


class JsonlAttemptStore:
    """Append-only attempt log, one JSON object per line."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def save_attempt(self, record: AttemptRecord) -> AttemptRecord:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record.to_dict(), ensure_ascii=False))
                fh.write("\n")
        except OSError as exc:
            raise StorageError(
                f"Could not write attempt to {self.path}: {exc}"
            ) from exc
        _LOGGER.info(
            "Stored quiz attempt",
            extra={"content_id": record.content_id, "path": self.path},
        )
        return record

    def load_attempts(self) -> list[AttemptRecord]:
        """Return every stored attempt in file order."""

        if not self.path.exists():
            return []
        records: list[AttemptRecord] = []
        with self.path.open("r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(AttemptRecord.from_dict(json.loads(line)))
                except (ValueError, KeyError, TypeError) as exc:
                    raise StorageError(
                        f"{self.path}:{lineno}: malformed attempt ({exc})"
                    ) from exc
        return records

    def attempts_for(self, content_id: str) -> list[AttemptRecord]:
        return [
            record
            for record in self.load_attempts()
            if record.content_id == content_id
        ]

    def has_attempted(self, content_id: str) -> bool:
        return any(
            record.content_id == content_id for record in self.load_attempts()
        )

    def latest_attempts(
        self, content_ids: Iterable[str] | None = None
    ) -> list[AttemptRecord]:
        """Most recent attempt per content id, newest first."""

        wanted = set(content_ids) if content_ids is not None else None
        latest: dict[str, AttemptRecord] = {}
        for record in self.load_attempts():
            if wanted is not None and record.content_id not in wanted:
                continue
            seen = latest.get(record.content_id)
            if seen is None or record.completed_at >= seen.completed_at:
                latest[record.content_id] = record
        return sorted(
            latest.values(), key=lambda item: item.completed_at, reverse=True
        )
