"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from patrol_tracker.config import Settings
from patrol_tracker.containers import AppContainer
from patrol_tracker.domain.organization import Area, Checkpoint, Company, Site
from patrol_tracker.domain.patrols import GeoPoint, PatrolSession, PatrolStatus, Shift
from patrol_tracker.services.directory import DirectoryRepository, DirectoryService
from patrol_tracker.services.geolocation import (
    LocationError,
    LocationErrorKind,
    LocationProvider,
)
from patrol_tracker.services.patrols import PatrolRegistry, PatrolSessionService
from patrol_tracker.services.repositories import PatrolRepository

COMPANY = Company(id="comp1", name="Acme Security", custom_id="ACME")
SITE = Site(id="site1", company_id="comp1", name="Downtown Tower", custom_id=" ")
AREA = Area(id="area1", site_id="site1", name="Lobby", custom_id="DT-001")
OTHER_AREA = Area(id="area2", site_id="site1", name="Garage")
CHECKPOINTS = [
    Checkpoint(id="point-a", area_id="area1", name="Front Door"),
    Checkpoint(id="point-b", area_id="area1", name="Elevator Bank"),
    Checkpoint(id="point-c", area_id="area1", name="Mail Room"),
]
GARAGE_CHECKPOINT = Checkpoint(id="point-g", area_id="area2", name="Ramp")
DEFAULT_LOCATION = GeoPoint(latitude=52.5200, longitude=13.4050)


def make_payload(  # noqa: PLR0913
    checkpoint_id: str,
    company: str = "ACME",
    site: str = "site1",
    area: str = "DT-001",
    payload_type: str = "patrol-point",
) -> str:
    """Build a scanned payload matching the default route."""
    return json.dumps(
        {
            "type": payload_type,
            "pointId": checkpoint_id,
            "companyIdentifier": company,
            "siteIdentifier": site,
            "areaIdentifier": area,
        }
    )


@dataclass
class InMemoryDirectoryRepository(DirectoryRepository):
    """In-memory directory for tests."""

    companies: dict[str, Company] = field(default_factory=dict)
    sites: dict[str, Site] = field(default_factory=dict)
    areas: dict[str, Area] = field(default_factory=dict)
    checkpoints: dict[str, Checkpoint] = field(default_factory=dict)

    @classmethod
    def seeded(cls) -> "InMemoryDirectoryRepository":
        repository = cls()
        repository.companies[COMPANY.id] = COMPANY
        repository.sites[SITE.id] = SITE
        for area in (AREA, OTHER_AREA):
            repository.areas[area.id] = area
        for checkpoint in [*CHECKPOINTS, GARAGE_CHECKPOINT]:
            repository.checkpoints[checkpoint.id] = checkpoint
        return repository

    def get_company(self, company_id: str) -> Company | None:
        return self.companies.get(company_id)

    def get_site(self, site_id: str) -> Site | None:
        return self.sites.get(site_id)

    def get_area(self, area_id: str) -> Area | None:
        return self.areas.get(area_id)

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint | None:
        return self.checkpoints.get(checkpoint_id)

    def list_checkpoints(self, area_id: str) -> list[Checkpoint]:
        return [
            checkpoint
            for checkpoint in self.checkpoints.values()
            if checkpoint.area_id == area_id
        ]

    def count_sites(self) -> int:
        return len(self.sites)


@dataclass
class InMemoryPatrolRepository(PatrolRepository):
    """In-memory patrol repository for tests."""

    sessions: dict[str, PatrolSession] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    failures_remaining: int = 0

    def create_session(
        self,
        officer_name: str,
        company_id: str,
        site_id: str,
        area_id: str,
        shift: Shift,
    ) -> PatrolSession:
        session = PatrolSession(
            id=f"patrol-{uuid4()}",
            officer_name=officer_name,
            company_id=company_id,
            site_id=site_id,
            area_id=area_id,
            start_time=datetime.now(tz=UTC),
            shift=shift,
            status=PatrolStatus.IN_PROGRESS,
        )
        self.sessions[session.id] = session
        return session

    def update_session(
        self, session_id: str, fields: dict[str, object]
    ) -> PatrolSession | None:
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise RuntimeError("database unavailable")
        self.updates.append((session_id, dict(fields)))
        session = self.sessions.get(session_id)
        if session is None:
            return None
        updated = replace(session, **fields)
        self.sessions[session_id] = updated
        return updated

    def get_session(self, session_id: str) -> PatrolSession | None:
        return self.sessions.get(session_id)

    def list_sessions(
        self, limit: int = 20, officer: str | None = None
    ) -> list[PatrolSession]:
        sessions = self._newest_first()
        if officer:
            needle = officer.lower()
            sessions = [
                session
                for session in sessions
                if needle in session.officer_name.lower()
            ]
        return sessions[:limit]

    def list_finished_sessions(self, limit: int = 5) -> list[PatrolSession]:
        finished = [
            session
            for session in self._newest_first()
            if session.status is not PatrolStatus.IN_PROGRESS
        ]
        return finished[:limit]

    def _newest_first(self) -> list[PatrolSession]:
        return sorted(
            self.sessions.values(), key=lambda item: item.start_time, reverse=True
        )


@dataclass
class FakeLocationProvider(LocationProvider):
    """Location provider returning a fixed fix or failure."""

    location: GeoPoint = DEFAULT_LOCATION
    error: LocationErrorKind | None = None
    hang: bool = False
    calls: int = 0

    async def current_position(self) -> GeoPoint:
        self.calls += 1
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise LocationError(self.error)
        return self.location


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
    )


@pytest.fixture
def directory_repository() -> InMemoryDirectoryRepository:
    return InMemoryDirectoryRepository.seeded()


@pytest.fixture
def patrol_repository() -> InMemoryPatrolRepository:
    return InMemoryPatrolRepository()


@pytest.fixture
def patrol_service(
    directory_repository: InMemoryDirectoryRepository,
    patrol_repository: InMemoryPatrolRepository,
) -> PatrolSessionService:
    return PatrolSessionService(
        patrol_repository=patrol_repository,
        directory_service=DirectoryService(directory_repository),
        location_timeout_seconds=1.0,
    )


@pytest.fixture
def container(
    settings: Settings,
    directory_repository: InMemoryDirectoryRepository,
    patrol_repository: InMemoryPatrolRepository,
) -> AppContainer:
    directory_service = DirectoryService(directory_repository)
    patrol_service = PatrolSessionService(
        patrol_repository=patrol_repository,
        directory_service=directory_service,
        autosave_interval_seconds=settings.autosave_interval_seconds,
        location_timeout_seconds=1.0,
    )
    patrol_registry = PatrolRegistry()

    async def close_resources() -> None:
        await patrol_registry.close()

    return AppContainer(
        settings=settings,
        directory_service=directory_service,
        patrol_service=patrol_service,
        patrol_registry=patrol_registry,
        close_resources=close_resources,
    )
