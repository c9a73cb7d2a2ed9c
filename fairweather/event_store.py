"""JSON file-backed event store."""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from fairweather.exceptions import EventNotFoundError
from fairweather.models.event import Event

logger = structlog.get_logger(__name__)


class EventStore:
    """Event records persisted as a single ``{"events": [...]}`` document.

    The file is re-read on every operation, so edits made to it outside the
    process show up on the next call. Read-modify-write sequences run under
    one lock and the document is swapped in atomically.
    Entries that are not valid events are kept in the file untouched but
    are never returned. File I/O runs in a worker thread.
    """

    def __init__(self, path: str):
        """Initialize the store.

        Args:
            path: Location of the JSON document; created on first write
        """
        self.path = Path(path)
        self._write_lock = asyncio.Lock()
        self.logger = logger.bind(component="event_store", path=str(self.path))

    def _load(self) -> List[Any]:
        """Read the raw events list, treating a missing or corrupt file as empty."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning("Event store unreadable, starting empty", error=str(e))
            return []

        events = data.get("events") if isinstance(data, dict) else None
        if not isinstance(events, list):
            self.logger.warning("Event store has no events list, starting empty")
            return []

        return events

    def _save(self, entries: List[Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".events-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"events": entries}, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _to_event(self, entry: Any) -> Optional[Event]:
        """Build an Event from a stored entry, or None if the entry is damaged."""
        try:
            return Event.model_validate(entry)
        except ValidationError as e:
            self.logger.warning(
                "Skipping invalid stored event",
                event_id=entry.get("id") if isinstance(entry, dict) else None,
                errors=e.error_count(),
            )
            return None

    def _find(self, entries: List[Any], event_id: int) -> Optional[Dict[str, Any]]:
        """First valid record with the given id."""
        for entry in entries:
            if isinstance(entry, dict) and entry.get("id") == event_id:
                return entry if self._to_event(entry) is not None else None
        return None

    @staticmethod
    def _next_id(entries: List[Any]) -> int:
        """Entry count plus one, moved past any id already taken."""
        taken = {entry.get("id") for entry in entries if isinstance(entry, dict)}
        next_id = len(entries) + 1
        while next_id in taken:
            next_id += 1
        return next_id

    async def list_events(self) -> List[Event]:
        """Return every valid stored event in insertion order."""
        entries = await asyncio.to_thread(self._load)
        events = (self._to_event(entry) for entry in entries)
        return [event for event in events if event is not None]

    async def get_event(self, event_id: int) -> Optional[Event]:
        """Return the event with the given id, or None."""
        record = self._find(await asyncio.to_thread(self._load), event_id)
        return Event.model_validate(record) if record is not None else None

    async def create_event(self, fields: Dict[str, Any]) -> Event:
        """
        Persist a new event.

        The id is the number of stored entries plus one, skipping ahead if
        an externally edited file already uses that id.

        Args:
            fields: Event fields other than the id

        Returns:
            The stored event
        """
        async with self._write_lock:
            entries = await asyncio.to_thread(self._load)
            record = {"id": self._next_id(entries), **{k: v for k, v in fields.items() if k != "id"}}
            entries.append(record)
            await asyncio.to_thread(self._save, entries)

        self.logger.info("Created event", event_id=record["id"])
        return Event.model_validate(record)

    async def update_event(self, event_id: int, fields: Dict[str, Any]) -> Event:
        """
        Shallow-merge fields into an existing event.

        Fields not present in ``fields`` are left untouched and the id
        cannot be changed.

        Raises:
            EventNotFoundError: If no valid event has the given id
        """
        async with self._write_lock:
            entries = await asyncio.to_thread(self._load)
            record = self._find(entries, event_id)
            if record is None:
                raise EventNotFoundError(event_id)

            record.update({k: v for k, v in fields.items() if k != "id"})
            await asyncio.to_thread(self._save, entries)

        self.logger.info("Updated event", event_id=event_id, fields=sorted(fields))
        return Event.model_validate(record)
