"""Estimation history stores."""

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

import structlog

from ..models.estimation import EstimationRecord

log = structlog.get_logger()


class EstimationStore(ABC):
    """Abstract history of estimation records.
    
    Implementations must serialize writes and hand out snapshots, so a
    reader never observes a half-updated record.
    """
    
    @abstractmethod
    def append(self, record: EstimationRecord) -> None:
        """Append a new record."""
        pass
    
    @abstractmethod
    def complete(
        self,
        item_id: str,
        actual_points: float,
        completed_at: datetime,
    ) -> Optional[EstimationRecord]:
        """Fill the actual on the oldest pending record for ``item_id``.
        
        Returns the updated record, or None when no pending record exists.
        """
        pass
    
    @abstractmethod
    def records(self) -> List[EstimationRecord]:
        """Return a snapshot of all records."""
        pass
    
    @abstractmethod
    def replace_all(self, records: Iterable[EstimationRecord]) -> None:
        """Replace the whole history."""
        pass


class InMemoryEstimationStore(EstimationStore):
    """Append-only list guarded by a coarse lock."""
    
    def __init__(self, records: Optional[Iterable[EstimationRecord]] = None):
        self._lock = threading.Lock()
        self._records: List[EstimationRecord] = list(records or [])
    
    def append(self, record: EstimationRecord) -> None:
        with self._lock:
            self._commit(self._records + [record])
    
    def complete(
        self,
        item_id: str,
        actual_points: float,
        completed_at: datetime,
    ) -> Optional[EstimationRecord]:
        with self._lock:
            for position, record in enumerate(self._records):
                if record.item_id == item_id and not record.is_completed:
                    updated = replace(record, actual_points=actual_points, completed_at=completed_at)
                    records = list(self._records)
                    records[position] = updated
                    self._commit(records)
                    return updated
        return None
    
    def records(self) -> List[EstimationRecord]:
        with self._lock:
            return list(self._records)
    
    def replace_all(self, records: Iterable[EstimationRecord]) -> None:
        with self._lock:
            self._commit(list(records))
    
    def _commit(self, records: List[EstimationRecord]) -> None:
        """Persist, then publish. Called with the lock held."""
        self._persist(records)
        self._records = records
    
    def _persist(self, records: List[EstimationRecord]) -> None:
        """Hook for durable stores; a raise leaves the history unchanged."""


class JsonFileEstimationStore(InMemoryEstimationStore):
    """In-memory store that mirrors every write to a JSON file."""
    
    def __init__(self, path: str):
        self.path = Path(path)
        records = []
        if self.path.exists():
            with open(self.path, 'r') as f:
                records = [EstimationRecord.from_dict(row) for row in json.load(f)]
            log.debug("Estimation history loaded", path=str(self.path), records=len(records))
        super().__init__(records)
    
    def _persist(self, records: List[EstimationRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            json.dump([record.to_dict() for record in records], f, indent=2)
        tmp_path.replace(self.path)
