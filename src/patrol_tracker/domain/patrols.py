"""Domain models for patrol sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PatrolStatus(str, Enum):
    """Persisted status of a patrol session."""

    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    MISSED_POINTS = "Missed Points"


class Shift(str, Enum):
    """Shift during which a patrol is walked."""

    DAY = "Day"
    NIGHT = "Night"


@dataclass(frozen=True)
class GeoPoint:
    """A resolved device location."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class ScanRecord:
    """A checkpoint visit proven by a scan."""

    id: str
    checkpoint_id: str
    checkpoint_name: str
    timestamp: datetime
    location: GeoPoint


@dataclass(frozen=True)
class PatrolSession:
    """Represents a patrol session.

    Instances are immutable; every change produces a new value, so a reference
    held by a reader is always a consistent snapshot.
    """

    id: str
    officer_name: str
    company_id: str
    site_id: str
    area_id: str
    start_time: datetime
    shift: Shift
    status: PatrolStatus = PatrolStatus.IN_PROGRESS
    scans: tuple[ScanRecord, ...] = ()
    end_time: datetime | None = None
    signature: str | None = None

    def has_scanned(self, checkpoint_id: str) -> bool:
        """Return True if the checkpoint already has a scan record."""
        return any(scan.checkpoint_id == checkpoint_id for scan in self.scans)
