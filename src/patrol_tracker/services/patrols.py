"""Patrol session state machine."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from patrol_tracker.domain.organization import Checkpoint
from patrol_tracker.domain.patrols import PatrolSession, ScanRecord, Shift
from patrol_tracker.domain.scans import RejectionReason, ScanOutcome, rejection_message
from patrol_tracker.services.autosave import AutosaveScheduler
from patrol_tracker.services.coverage import Coverage, compute_coverage
from patrol_tracker.services.directory import DirectoryService, DirectorySnapshot
from patrol_tracker.services.geolocation import (
    CancellationToken,
    GeolocationGate,
    LocationError,
    LocationErrorKind,
    LocationProvider,
    ScanCancelledError,
)
from patrol_tracker.services.repositories import PatrolRepository, final_fields
from patrol_tracker.services.scans import validate_scan

logger = logging.getLogger(__name__)

_LOCATION_REJECTIONS = {
    LocationErrorKind.POSITION_UNAVAILABLE: RejectionReason.LOCATION_UNAVAILABLE,
    LocationErrorKind.PERMISSION_DENIED: RejectionReason.LOCATION_PERMISSION_DENIED,
    LocationErrorKind.TIMEOUT: RejectionReason.LOCATION_TIMEOUT,
}


class PatrolValidationError(ValueError):
    """Raised when a patrol cannot be started with the given details."""


class PatrolStateError(RuntimeError):
    """Raised when an operation does not fit the patrol's current phase."""


class PatrolPhase(str, Enum):
    """Lifecycle of a patrol inside the engine."""

    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    DISCARDED = "discarded"


@dataclass
class ActivePatrol:
    """Engine-side state of one running patrol.

    `session` is replaced, never mutated, so readers always see a whole
    snapshot.
    """

    session: PatrolSession
    directory: DirectorySnapshot
    autosave: AutosaveScheduler | None = None
    phase: PatrolPhase = PatrolPhase.IN_PROGRESS

    @property
    def id(self) -> str:
        return self.session.id

    def coverage(self) -> Coverage:
        """Coverage of the current snapshot."""
        return compute_coverage(self.session, self.directory.total_checkpoints)


@dataclass(frozen=True)
class DashboardSummary:
    site_count: int
    recent_patrols: list[PatrolSession]


@dataclass
class PatrolRegistry:
    """Active patrols of this process, keyed by session id."""

    patrols: dict[str, ActivePatrol] = field(default_factory=dict)

    def add(self, patrol: ActivePatrol) -> None:
        self.patrols[patrol.id] = patrol

    def get(self, session_id: str) -> ActivePatrol | None:
        return self.patrols.get(session_id)

    def remove(self, session_id: str) -> ActivePatrol | None:
        return self.patrols.pop(session_id, None)

    def active(self) -> list[ActivePatrol]:
        return list(self.patrols.values())

    async def close(self) -> None:
        """Stop every autosave loop."""
        for patrol in self.patrols.values():
            if patrol.autosave is not None:
                await patrol.autosave.stop()


@dataclass
class PatrolSessionService:
    """Drives a patrol from start to submission."""

    patrol_repository: PatrolRepository
    directory_service: DirectoryService
    autosave_interval_seconds: float = 30.0
    location_timeout_seconds: float = 30.0

    async def start(  # noqa: PLR0913
        self,
        officer_name: str,
        company_id: str,
        site_id: str,
        area_id: str,
        shift: Shift | str,
    ) -> ActivePatrol:
        """Create a session and begin autosaving it."""
        required = {
            "officer_name": officer_name,
            "company_id": company_id,
            "site_id": site_id,
            "area_id": area_id,
            "shift": shift,
        }
        missing = [
            name
            for name, value in required.items()
            if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise PatrolValidationError(
                f"Missing required patrol fields: {', '.join(missing)}"
            )
        try:
            resolved_shift = Shift(shift)
        except ValueError as exc:
            raise PatrolValidationError(f"Unknown shift: {shift}") from exc

        directory = await asyncio.to_thread(
            self.directory_service.snapshot, company_id, site_id, area_id
        )
        if directory is None:
            raise PatrolValidationError(
                "Company, site and area do not form a known patrol route."
            )

        session = await asyncio.to_thread(
            self.patrol_repository.create_session,
            officer_name=officer_name.strip(),
            company_id=company_id,
            site_id=site_id,
            area_id=area_id,
            shift=resolved_shift,
        )
        patrol = ActivePatrol(session=session, directory=directory)
        patrol.autosave = AutosaveScheduler(
            repository=self.patrol_repository,
            snapshot=lambda: patrol.session,
            interval_seconds=self.autosave_interval_seconds,
        )
        patrol.autosave.start()
        logger.info(
            "Patrol %s started by %s over area %s (%d checkpoints)",
            session.id,
            session.officer_name,
            area_id,
            directory.total_checkpoints,
        )
        return patrol

    async def record_scan(
        self,
        patrol: ActivePatrol,
        raw_payload: object,
        location_provider: LocationProvider,
        cancellation: CancellationToken | None = None,
    ) -> ScanOutcome:
        """Validate a decoded payload and, with a location fix, record it."""
        _require_in_progress(patrol)
        validation = validate_scan(raw_payload, patrol.session, patrol.directory)
        if validation.rejection is not None or validation.checkpoint is None:
            return _reject(
                patrol,
                validation.rejection or RejectionReason.UNRECOGNIZED_PAYLOAD,
                validation.checkpoint,
            )
        checkpoint = validation.checkpoint

        gate = GeolocationGate(location_provider, self.location_timeout_seconds)
        try:
            location = await gate.capture(cancellation)
        except LocationError as exc:
            return _reject(patrol, _LOCATION_REJECTIONS[exc.kind], checkpoint)
        except ScanCancelledError:
            return _reject(patrol, RejectionReason.SCAN_CANCELLED, checkpoint)

        # State may have moved on while waiting for the fix.
        _require_in_progress(patrol)
        if patrol.session.has_scanned(checkpoint.id):
            return _reject(patrol, RejectionReason.ALREADY_SCANNED, checkpoint)

        record = ScanRecord(
            id=str(uuid4()),
            checkpoint_id=checkpoint.id,
            checkpoint_name=checkpoint.name,
            timestamp=datetime.now(tz=UTC),
            location=location,
        )
        patrol.session = replace(patrol.session, scans=(*patrol.session.scans, record))
        logger.info("Patrol %s scanned checkpoint %s", patrol.id, checkpoint.id)
        return ScanOutcome(record=record, message=f"Scanned: {checkpoint.name}")

    def update_signature(self, patrol: ActivePatrol, signature: str | None) -> None:
        """Replace the officer's signature; an empty value clears it."""
        _require_in_progress(patrol)
        patrol.session = replace(patrol.session, signature=signature or None)

    def coverage(self, patrol: ActivePatrol) -> Coverage:
        """Current coverage for progress display."""
        return patrol.coverage()

    async def submit(self, patrol: ActivePatrol) -> PatrolSession:
        """Finalize the patrol and hand it to persistence.

        Callers are expected to collect a signature first. Scans and
        signature changes are refused while the final write is in flight.
        """
        _require_in_progress(patrol)
        patrol.phase = PatrolPhase.SUBMITTING
        if not patrol.session.signature:
            logger.warning("Patrol %s submitted without a signature", patrol.id)
        coverage = patrol.coverage()
        final = replace(
            patrol.session,
            status=coverage.status,
            end_time=datetime.now(tz=UTC),
        )
        try:
            if patrol.autosave is not None:
                await patrol.autosave.stop()
            stored = await asyncio.to_thread(
                self.patrol_repository.update_session, final.id, final_fields(final)
            )
            if stored is None:
                raise PatrolStateError(f"Patrol {final.id} no longer exists")
        except Exception:
            logger.exception("Failed to submit patrol %s", final.id)
            patrol.phase = PatrolPhase.IN_PROGRESS
            if patrol.autosave is not None:
                patrol.autosave.start()
            raise
        patrol.session = stored
        patrol.phase = PatrolPhase.SUBMITTED
        logger.info(
            "Patrol %s submitted: %s (%d/%d checkpoints)",
            stored.id,
            stored.status.value,
            coverage.unique_scanned,
            coverage.total,
        )
        return stored

    async def discard(self, patrol: ActivePatrol) -> None:
        """Abandon a patrol without writing a report."""
        _require_in_progress(patrol)
        if patrol.autosave is not None:
            await patrol.autosave.stop()
        patrol.phase = PatrolPhase.DISCARDED
        logger.info("Patrol %s discarded", patrol.id)

    def list_reports(
        self, limit: int = 20, officer: str | None = None
    ) -> list[PatrolSession]:
        """Return persisted patrols, newest first.

        `officer` narrows the list to officer names containing it, ignoring case.
        """
        query = officer.strip() if officer else None
        return self.patrol_repository.list_sessions(limit, officer=query or None)

    def get_report(self, session_id: str) -> PatrolSession | None:
        """Return one persisted patrol, if present."""
        return self.patrol_repository.get_session(session_id)

    def dashboard(self, recent_limit: int = 5) -> DashboardSummary:
        """Site count and the most recent finished patrols."""
        return DashboardSummary(
            site_count=self.directory_service.count_sites(),
            recent_patrols=self.patrol_repository.list_finished_sessions(recent_limit),
        )


def _require_in_progress(patrol: ActivePatrol) -> None:
    if patrol.phase is not PatrolPhase.IN_PROGRESS:
        raise PatrolStateError(f"Patrol {patrol.id} is {patrol.phase.value}")


def _reject(
    patrol: ActivePatrol, reason: RejectionReason, checkpoint: Checkpoint | None
) -> ScanOutcome:
    logger.info("Patrol %s scan rejected: %s", patrol.id, reason.value)
    return ScanOutcome(rejection=reason, message=rejection_message(reason, checkpoint))
