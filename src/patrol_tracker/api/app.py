"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from patrol_tracker.adapters.reported_location_provider import (
    ReportedLocationProvider,
)
from patrol_tracker.api.admin import router as admin_router
from patrol_tracker.api.patrol_models import (
    ScanRequest,
    SignatureRequest,
    StartPatrolRequest,
)
from patrol_tracker.api.serializers import (
    serialize_coverage,
    serialize_outcome,
    serialize_scan,
    serialize_session,
)
from patrol_tracker.app_logging import configure_logging
from patrol_tracker.containers import AppContainer
from patrol_tracker.domain.patrols import GeoPoint
from patrol_tracker.services.coverage import Coverage
from patrol_tracker.services.identifiers import encode_checkpoint_payload
from patrol_tracker.services.patrols import (
    ActivePatrol,
    PatrolStateError,
    PatrolValidationError,
)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to stop patrol autosaves")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/patrols", status_code=status.HTTP_201_CREATED)
    async def start_patrol(
        body: StartPatrolRequest, request: Request
    ) -> dict[str, object]:
        """Start a patrol over an area."""
        state_container: AppContainer = request.app.state.container
        try:
            patrol = await state_container.patrol_service.start(
                officer_name=body.officer_name,
                company_id=body.company_id,
                site_id=body.site_id,
                area_id=body.area_id,
                shift=body.shift,
            )
        except PatrolValidationError as exc:
            raise HTTPException(
                status_code=422, detail=str(exc)
            ) from exc
        state_container.patrol_registry.add(patrol)
        return {
            "patrol": serialize_session(patrol.session),
            "coverage": serialize_coverage(patrol.coverage()),
            "checkpoints": [
                {"id": checkpoint.id, "name": checkpoint.name}
                for checkpoint in patrol.directory.checkpoints.values()
            ],
        }

    @app.post("/patrols/{patrol_id}/scans")
    async def record_scan(
        patrol_id: str, body: ScanRequest, request: Request
    ) -> dict[str, object]:
        """Record a decoded checkpoint code for a running patrol."""
        state_container: AppContainer = request.app.state.container
        patrol = _get_active(state_container, patrol_id)
        provider = ReportedLocationProvider(
            location=(
                GeoPoint(
                    latitude=body.location.latitude,
                    longitude=body.location.longitude,
                )
                if body.location
                else None
            ),
            error=body.location_error,
        )
        try:
            outcome = await state_container.patrol_service.record_scan(
                patrol, body.payload, provider
            )
        except PatrolStateError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return {
            **serialize_outcome(outcome),
            "coverage": serialize_coverage(patrol.coverage()),
        }

    @app.put("/patrols/{patrol_id}/signature")
    async def update_signature(
        patrol_id: str, body: SignatureRequest, request: Request
    ) -> dict[str, object]:
        """Store or clear the officer's signature."""
        state_container: AppContainer = request.app.state.container
        patrol = _get_active(state_container, patrol_id)
        try:
            state_container.patrol_service.update_signature(patrol, body.signature)
        except PatrolStateError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return {"has_signature": patrol.session.signature is not None}

    @app.get("/patrols/{patrol_id}/coverage")
    async def patrol_coverage(patrol_id: str, request: Request) -> dict[str, object]:
        """Return progress for a running patrol."""
        state_container: AppContainer = request.app.state.container
        patrol = _get_active(state_container, patrol_id)
        coverage = state_container.patrol_service.coverage(patrol)
        scanned = {scan.checkpoint_id for scan in patrol.session.scans}
        return {
            "coverage": serialize_coverage(coverage),
            "checkpoints": [
                {
                    "id": checkpoint.id,
                    "name": checkpoint.name,
                    "scanned": checkpoint.id in scanned,
                }
                for checkpoint in patrol.directory.checkpoints.values()
            ],
            "scans": [serialize_scan(scan) for scan in patrol.session.scans],
        }

    @app.post("/patrols/{patrol_id}/submit")
    async def submit_patrol(patrol_id: str, request: Request) -> dict[str, object]:
        """Submit a signed patrol report."""
        state_container: AppContainer = request.app.state.container
        patrol = _get_active(state_container, patrol_id)
        if not patrol.session.signature:
            raise HTTPException(
                status_code=422,
                detail="Please provide a signature before submitting.",
            )
        coverage = patrol.coverage()
        try:
            session = await state_container.patrol_service.submit(patrol)
        except PatrolStateError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        state_container.patrol_registry.remove(patrol_id)
        return {
            "patrol": serialize_session(session),
            "coverage": serialize_coverage(coverage),
            "notice": _submission_notice(coverage),
        }

    @app.delete("/patrols/{patrol_id}")
    async def discard_patrol(patrol_id: str, request: Request) -> dict[str, str]:
        """Abandon a running patrol."""
        state_container: AppContainer = request.app.state.container
        patrol = _get_active(state_container, patrol_id)
        try:
            await state_container.patrol_service.discard(patrol)
        except PatrolStateError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        state_container.patrol_registry.remove(patrol_id)
        return {"status": "discarded"}

    @app.get("/checkpoints/{checkpoint_id}/payload")
    async def checkpoint_payload(
        checkpoint_id: str, request: Request
    ) -> dict[str, str]:
        """Return the text to encode on a printed checkpoint code."""
        state_container: AppContainer = request.app.state.container
        context = state_container.directory_service.checkpoint_context(checkpoint_id)
        if context is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"payload": encode_checkpoint_payload(*context)}

    return app


def _get_active(container: AppContainer, patrol_id: str) -> ActivePatrol:
    patrol = container.patrol_registry.get(patrol_id)
    if patrol is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No active patrol."
        )
    return patrol


def _submission_notice(coverage: Coverage) -> str:
    if coverage.missed:
        return f"Report submitted with {coverage.missed} missed points."
    return "Report submitted successfully!"
