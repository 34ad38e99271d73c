"""JSON rendering of patrol domain objects."""

from patrol_tracker.domain.patrols import PatrolSession, ScanRecord
from patrol_tracker.domain.scans import ScanOutcome
from patrol_tracker.services.coverage import Coverage


def serialize_scan(scan: ScanRecord) -> dict[str, object]:
    """Render a scan record as JSON-ready data."""
    return {
        "id": scan.id,
        "checkpoint_id": scan.checkpoint_id,
        "checkpoint_name": scan.checkpoint_name,
        "timestamp": scan.timestamp.isoformat(),
        "location": {
            "latitude": scan.location.latitude,
            "longitude": scan.location.longitude,
        },
    }


def serialize_session(session: PatrolSession) -> dict[str, object]:
    """Render a patrol session as JSON-ready data."""
    return {
        "id": session.id,
        "officer_name": session.officer_name,
        "company_id": session.company_id,
        "site_id": session.site_id,
        "area_id": session.area_id,
        "shift": session.shift.value,
        "status": session.status.value,
        "start_time": session.start_time.isoformat(),
        "end_time": session.end_time.isoformat() if session.end_time else None,
        "has_signature": session.signature is not None,
        "scans": [serialize_scan(scan) for scan in session.scans],
    }


def serialize_coverage(coverage: Coverage) -> dict[str, object]:
    """Render coverage as JSON-ready data."""
    return {
        "unique_scanned": coverage.unique_scanned,
        "total": coverage.total,
        "percent": round(coverage.percent, 1),
        "status": coverage.status.value,
    }


def serialize_outcome(outcome: ScanOutcome) -> dict[str, object]:
    """Render a scan outcome as JSON-ready data."""
    return {
        "accepted": outcome.accepted,
        "reason": outcome.rejection.value if outcome.rejection else None,
        "severity": outcome.severity,
        "message": outcome.message,
        "scan": serialize_scan(outcome.record) if outcome.record else None,
    }
