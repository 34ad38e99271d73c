"""Supabase-backed patrol session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from patrol_tracker.domain.patrols import (
    GeoPoint,
    PatrolSession,
    PatrolStatus,
    ScanRecord,
    Shift,
)
from patrol_tracker.services.repositories import UPDATABLE_FIELDS, PatrolRepository

_COLUMNS = (
    "id, officer_name, company_id, site_id, area_id, shift, status, "
    "scans_json, signature_data_url, start_time, end_time"
)


@dataclass
class SupabasePatrolRepository(PatrolRepository):
    """Supabase implementation for patrol sessions."""

    client: Client

    def create_session(
        self,
        officer_name: str,
        company_id: str,
        site_id: str,
        area_id: str,
        shift: Shift,
    ) -> PatrolSession:
        """Create a session row and return it."""
        response = (
            self.client.table("patrol_sessions")
            .insert(
                {
                    "officer_name": officer_name,
                    "company_id": company_id,
                    "site_id": site_id,
                    "area_id": area_id,
                    "shift": shift.value,
                    "status": PatrolStatus.IN_PROGRESS.value,
                    "scans_json": [],
                    "start_time": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create patrol session")
        return _session_from_row(response.data[0])

    def update_session(
        self, session_id: str, fields: dict[str, object]
    ) -> PatrolSession | None:
        """Write the updatable fields present in `fields`."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        payload = _row_fields(fields)
        if not payload:
            return self.get_session(session_id)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("patrol_sessions")
            .update(payload)
            .eq("id", session_id)
            .execute()
        )
        if not response.data:
            return None
        return _session_from_row(response.data[0])

    def get_session(self, session_id: str) -> PatrolSession | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("patrol_sessions")
            .select(_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _session_from_row(response.data[0])

    def list_sessions(
        self, limit: int = 20, officer: str | None = None
    ) -> list[PatrolSession]:
        """Return the most recent sessions, optionally matching an officer."""
        query = self.client.table("patrol_sessions").select(_COLUMNS)
        if officer:
            query = query.ilike("officer_name", f"%{officer}%")
        response = query.order("start_time", desc=True).limit(limit).execute()
        return [_session_from_row(row) for row in response.data or []]

    def list_finished_sessions(self, limit: int = 5) -> list[PatrolSession]:
        """Return the most recent sessions that are no longer in progress."""
        response = (
            self.client.table("patrol_sessions")
            .select(_COLUMNS)
            .neq("status", PatrolStatus.IN_PROGRESS.value)
            .order("start_time", desc=True)
            .limit(limit)
            .execute()
        )
        return [_session_from_row(row) for row in response.data or []]


def _row_fields(fields: dict[str, object]) -> dict[str, object]:
    row: dict[str, object] = {}
    if "scans" in fields:
        scans = fields["scans"]
        row["scans_json"] = [
            _scan_to_json(scan) for scan in scans if isinstance(scan, ScanRecord)
        ]
    if "signature" in fields:
        row["signature_data_url"] = fields["signature"]
    if "status" in fields:
        status = fields["status"]
        row["status"] = status.value if isinstance(status, PatrolStatus) else status
    if "end_time" in fields:
        end_time = fields["end_time"]
        row["end_time"] = (
            end_time.isoformat() if isinstance(end_time, datetime) else end_time
        )
    return row


def _scan_to_json(scan: ScanRecord) -> dict[str, object]:
    return {
        "id": scan.id,
        "pointId": scan.checkpoint_id,
        "pointName": scan.checkpoint_name,
        "timestamp": scan.timestamp.isoformat(),
        "location": {
            "latitude": scan.location.latitude,
            "longitude": scan.location.longitude,
        },
    }


def _scan_from_json(data: dict[str, object]) -> ScanRecord:
    location = data.get("location") or {}
    return ScanRecord(
        id=str(data["id"]),
        checkpoint_id=str(data["pointId"]),
        checkpoint_name=str(data.get("pointName", "")),
        timestamp=_parse_datetime(data["timestamp"]),
        location=GeoPoint(
            latitude=float(location["latitude"]),
            longitude=float(location["longitude"]),
        ),
    )


def _parse_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _session_from_row(row: dict[str, object]) -> PatrolSession:
    scans = row.get("scans_json") or []
    end_time = row.get("end_time")
    return PatrolSession(
        id=str(row["id"]),
        officer_name=str(row["officer_name"]),
        company_id=str(row["company_id"]),
        site_id=str(row["site_id"]),
        area_id=str(row["area_id"]),
        start_time=_parse_datetime(row["start_time"]),
        shift=Shift(row["shift"]),
        status=PatrolStatus(row["status"]),
        scans=tuple(_scan_from_json(scan) for scan in scans),
        end_time=_parse_datetime(end_time) if end_time else None,
        signature=row.get("signature_data_url") or None,
    )
