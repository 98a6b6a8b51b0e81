"""
JSON State Repository — Infrastructure adapter for the data file.

Implements StateRepository on top of a single JSON document plus a
directory of verbatim backups. Pydantic models describe the on-disk
format and take care of defaults for missing or null collections.
"""

import datetime as dt
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from grain.domain.constants import BACKUP_NAME_FORMAT
from grain.domain.day_log import DayLogStore
from grain.domain.errors import StorageError
from grain.domain.models import DayBucket, LogEntry, LogKind, UndoRecord
from grain.domain.ports import StateRepository
from grain.domain.state import AppState, TrackerConfig

logger = logging.getLogger(__name__)


def _parse_local_timestamp(value: Any) -> Any:
    """
    Accept RFC 3339 strings with any number of fractional digits and
    return a naive local wall-clock datetime.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        head, dot, rest = text.partition(".")
        if dot:
            digits = len(rest) - len(rest.lstrip("0123456789"))
            text = f"{head}.{rest[:min(digits, 6)]}{rest[digits:]}"
        value = dt.datetime.fromisoformat(text)
    if isinstance(value, dt.datetime) and value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# On-disk schema
# ---------------------------------------------------------------------------


class PersistedLog(BaseModel):
    type: LogKind
    timestamp: dt.datetime
    amount: int

    @field_validator("timestamp", mode="before")
    @classmethod
    def to_local(cls, v: Any) -> Any:
        return _parse_local_timestamp(v)

    @field_serializer("timestamp")
    def with_offset(self, v: dt.datetime) -> str:
        return v.astimezone().isoformat()

    def to_entry(self) -> LogEntry:
        return LogEntry(kind=self.type, timestamp=self.timestamp, amount=self.amount)

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "PersistedLog":
        return cls(type=entry.kind, timestamp=entry.timestamp, amount=entry.amount)


class PersistedDay(BaseModel):
    date: dt.date
    logs: list[PersistedLog] = Field(default_factory=list)

    @field_validator("logs", mode="before")
    @classmethod
    def null_logs(cls, v: Any) -> Any:
        return [] if v is None else v


class PersistedUndo(BaseModel):
    log: PersistedLog
    day: dt.date


class PersistedState(BaseModel):
    logs: list[PersistedDay] = Field(default_factory=list)
    weekly_surplus: dict[str, int] = Field(default_factory=dict)
    streak: int = 0
    best_surplus: int = 0
    undo_stack: list[PersistedUndo] = Field(default_factory=list)

    @field_validator("logs", "undo_stack", mode="before")
    @classmethod
    def null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("weekly_surplus", mode="before")
    @classmethod
    def null_map(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("streak", "best_surplus", mode="before")
    @classmethod
    def null_int(cls, v: Any) -> Any:
        return 0 if v is None else v

    def to_state(self, config: TrackerConfig) -> AppState:
        buckets = [
            DayBucket(
                date=day.date,
                entries=sorted((log.to_entry() for log in day.logs), key=lambda e: e.timestamp),
            )
            for day in self.logs
            if day.logs
        ]
        return AppState(
            config=config,
            store=DayLogStore(buckets),
            weekly_surplus=dict(self.weekly_surplus),
            streak=self.streak,
            best_surplus=self.best_surplus,
            undo_stack=[
                UndoRecord(entry=item.log.to_entry(), day=item.day) for item in self.undo_stack
            ],
        )

    @classmethod
    def from_state(cls, state: AppState) -> "PersistedState":
        return cls(
            logs=[
                PersistedDay(
                    date=bucket.date,
                    logs=[PersistedLog.from_entry(e) for e in bucket.entries],
                )
                for bucket in state.store
                if bucket.entries
            ],
            weekly_surplus=dict(state.weekly_surplus),
            streak=state.streak,
            best_surplus=state.best_surplus,
            undo_stack=[
                PersistedUndo(log=PersistedLog.from_entry(r.entry), day=r.day)
                for r in state.undo_stack
            ],
        )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class JsonStateRepository(StateRepository):
    """
    Stores the whole AppState (minus config) in one JSON file.

    Writes go through a temporary file in the same directory and are
    swapped in with os.replace, so a crash never leaves half a file.
    """

    def __init__(self, data_path: Path, backup_dir: Path):
        self.data_path = data_path
        self.backup_dir = backup_dir

    def exists(self) -> bool:
        return self.data_path.exists()

    def load(self, config: TrackerConfig) -> AppState:
        if not self.data_path.exists():
            logger.info(f"No data file at {self.data_path}, starting fresh")
            return AppState(config=config)

        try:
            raw = self.data_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not read data file '{self.data_path}': {e}") from e

        if not raw.strip():
            return AppState(config=config)

        persisted = self._parse(raw, self.data_path)
        state = persisted.to_state(config)
        logger.info(
            f"Loaded {len(state.store)} day(s), {len(state.undo_stack)} undo step(s) "
            f"from {self.data_path}"
        )
        return state

    def save(self, state: AppState) -> None:
        payload = PersistedState.from_state(state).model_dump_json(indent=2)
        self._atomic_write(self.data_path, payload)
        logger.info(f"Saved state to {self.data_path}")

    def backup(self, now: dt.datetime) -> Path:
        if not self.data_path.exists():
            raise StorageError(
                f"data file '{self.data_path}' does not exist, nothing to back up"
            )

        target = self.backup_dir / now.strftime(BACKUP_NAME_FORMAT)
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.data_path, target)
        except OSError as e:
            raise StorageError(f"could not write backup file '{target}': {e}") from e

        logger.info(f"Backed up {self.data_path} -> {target}")
        return target

    def restore(self, backup_path: Path) -> None:
        if not backup_path.is_file():
            raise StorageError(f"backup file '{backup_path}' does not exist")

        try:
            raw = backup_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not read backup file '{backup_path}': {e}") from e

        # Validate before overwriting anything
        self._parse(raw, backup_path)
        self._atomic_write(self.data_path, raw)
        logger.info(f"Restored {self.data_path} from {backup_path}")

    def list_backups(self) -> list[Path]:
        if not self.backup_dir.is_dir():
            return []
        return sorted(self.backup_dir.glob("*.json"), reverse=True)

    @staticmethod
    def _parse(raw: str, source: Path) -> PersistedState:
        try:
            return PersistedState.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"could not parse data file '{source}': {e}") from e

    @staticmethod
    def _atomic_write(path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"could not write data file '{path}': {e}") from e
