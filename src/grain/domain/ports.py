"""
Ports (interfaces) for state persistence.

Application services depend on this abstraction, not on the JSON adapter.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from .state import AppState, TrackerConfig


class StateRepository(ABC):
    """
    Port for loading and saving the tracker state.

    Implementations:
        - JsonStateRepository: a single JSON file plus a backups directory.
    """

    @abstractmethod
    def load(self, config: TrackerConfig) -> AppState:
        """
        Load the persisted state and attach `config` to it.

        Returns a fresh, empty state when nothing has been saved yet.
        """
        pass

    @abstractmethod
    def save(self, state: AppState) -> None:
        """Persist the full state, replacing whatever was stored."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass

    @abstractmethod
    def backup(self, now: datetime) -> Path:
        """Copy the stored state verbatim to a timestamped backup. Returns its path."""
        pass

    @abstractmethod
    def restore(self, backup_path: Path) -> None:
        """Overwrite the stored state with a validated backup file."""
        pass

    @abstractmethod
    def list_backups(self) -> list[Path]:
        pass
