"""Read access to the organizational directory."""

from dataclasses import dataclass, field
from typing import Protocol

from patrol_tracker.domain.organization import Area, Checkpoint, Company, Site


class DirectoryRepository(Protocol):
    """Lookup interface for companies, sites, areas and checkpoints."""

    def get_company(self, company_id: str) -> Company | None:
        """Return a company by id, if present."""

    def get_site(self, site_id: str) -> Site | None:
        """Return a site by id, if present."""

    def get_area(self, area_id: str) -> Area | None:
        """Return an area by id, if present."""

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint | None:
        """Return a checkpoint by id, if present."""

    def list_checkpoints(self, area_id: str) -> list[Checkpoint]:
        """Return all checkpoints of an area."""

    def count_sites(self) -> int:
        """Return how many sites are registered."""


@dataclass(frozen=True)
class DirectorySnapshot:
    """The organizational context of one patrol, fixed at start."""

    company: Company
    site: Site
    area: Area
    checkpoints: dict[str, Checkpoint] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        company: Company,
        site: Site,
        area: Area,
        checkpoints: list[Checkpoint],
    ) -> "DirectorySnapshot":
        """Index checkpoints by id."""
        return cls(
            company=company,
            site=site,
            area=area,
            checkpoints={checkpoint.id: checkpoint for checkpoint in checkpoints},
        )

    def lookup(self, checkpoint_id: str) -> Checkpoint | None:
        """Return a checkpoint of this area by id."""
        return self.checkpoints.get(checkpoint_id)

    @property
    def total_checkpoints(self) -> int:
        return len(self.checkpoints)


@dataclass
class DirectoryService:
    """Builds directory snapshots and renders checkpoint payloads."""

    repository: DirectoryRepository

    def snapshot(
        self, company_id: str, site_id: str, area_id: str
    ) -> DirectorySnapshot | None:
        """Load the context for a patrol, or None if it is not consistent."""
        company = self.repository.get_company(company_id)
        site = self.repository.get_site(site_id)
        area = self.repository.get_area(area_id)
        if company is None or site is None or area is None:
            return None
        if site.company_id != company.id or area.site_id != site.id:
            return None
        return DirectorySnapshot.build(
            company, site, area, self.repository.list_checkpoints(area.id)
        )

    def checkpoint_context(
        self, checkpoint_id: str
    ) -> tuple[Company, Site, Area, Checkpoint] | None:
        """Walk from a checkpoint up to its company."""
        checkpoint = self.repository.get_checkpoint(checkpoint_id)
        if checkpoint is None:
            return None
        area = self.repository.get_area(checkpoint.area_id)
        if area is None:
            return None
        site = self.repository.get_site(area.site_id)
        if site is None:
            return None
        company = self.repository.get_company(site.company_id)
        if company is None:
            return None
        return company, site, area, checkpoint

    def count_sites(self) -> int:
        return self.repository.count_sites()
