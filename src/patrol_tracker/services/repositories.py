"""Persistence interface for patrol sessions."""

from typing import Protocol

from patrol_tracker.domain.patrols import PatrolSession, Shift

UPDATABLE_FIELDS = frozenset({"end_time", "status", "scans", "signature"})


class PatrolRepository(Protocol):
    """Persistence interface for patrol sessions."""

    def create_session(
        self,
        officer_name: str,
        company_id: str,
        site_id: str,
        area_id: str,
        shift: Shift,
    ) -> PatrolSession:
        """Create an in-progress session, assigning its id and start time."""

    def update_session(
        self, session_id: str, fields: dict[str, object]
    ) -> PatrolSession | None:
        """Overwrite the given fields and return the stored session."""

    def get_session(self, session_id: str) -> PatrolSession | None:
        """Return a session by id, if present."""

    def list_sessions(
        self, limit: int = 20, officer: str | None = None
    ) -> list[PatrolSession]:
        """Return sessions ordered by start time, newest first.

        `officer` is a case-insensitive substring of the officer name.
        """

    def list_finished_sessions(self, limit: int = 5) -> list[PatrolSession]:
        """Return sessions no longer in progress, newest first."""


def progress_fields(session: PatrolSession) -> dict[str, object]:
    """Fields written by autosave while a patrol is running."""
    return {
        "scans": session.scans,
        "signature": session.signature,
        "status": session.status,
    }


def final_fields(session: PatrolSession) -> dict[str, object]:
    """Fields written when a patrol is submitted."""
    return {**progress_fields(session), "end_time": session.end_time}
