"""Supabase-backed directory of companies, sites, areas and checkpoints."""

from dataclasses import dataclass

from supabase import Client

from patrol_tracker.domain.organization import Area, Checkpoint, Company, Site
from patrol_tracker.services.directory import DirectoryRepository


@dataclass
class SupabaseDirectoryRepository(DirectoryRepository):
    """Supabase implementation of directory lookups."""

    client: Client

    def get_company(self, company_id: str) -> Company | None:
        """Return a company by id, if present."""
        row = self._fetch_one("companies", "id, name, custom_id", company_id)
        if row is None:
            return None
        return Company(id=row["id"], name=row["name"], custom_id=row.get("custom_id"))

    def get_site(self, site_id: str) -> Site | None:
        """Return a site by id, if present."""
        row = self._fetch_one(
            "sites", "id, company_id, name, address, custom_id", site_id
        )
        if row is None:
            return None
        return Site(
            id=row["id"],
            company_id=row["company_id"],
            name=row["name"],
            address=row.get("address") or "",
            custom_id=row.get("custom_id"),
        )

    def get_area(self, area_id: str) -> Area | None:
        """Return an area by id, if present."""
        row = self._fetch_one(
            "areas", "id, site_id, name, description, custom_id", area_id
        )
        if row is None:
            return None
        return Area(
            id=row["id"],
            site_id=row["site_id"],
            name=row["name"],
            description=row.get("description") or "",
            custom_id=row.get("custom_id"),
        )

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint | None:
        """Return a checkpoint by id, if present."""
        row = self._fetch_one("points", _CHECKPOINT_COLUMNS, checkpoint_id)
        if row is None:
            return None
        return _checkpoint_from_row(row)

    def list_checkpoints(self, area_id: str) -> list[Checkpoint]:
        """Return all checkpoints of an area, ordered by name."""
        response = (
            self.client.table("points")
            .select(_CHECKPOINT_COLUMNS)
            .eq("area_id", area_id)
            .order("name")
            .execute()
        )
        return [_checkpoint_from_row(row) for row in response.data or []]

    def count_sites(self) -> int:
        """Return how many sites are registered."""
        response = self.client.table("sites").select("id", count="exact").execute()
        return int(response.count or 0)

    def _fetch_one(
        self, table: str, columns: str, row_id: str
    ) -> dict[str, object] | None:
        response = (
            self.client.table(table).select(columns).eq("id", row_id).limit(1).execute()
        )
        if not response.data:
            return None
        return response.data[0]


_CHECKPOINT_COLUMNS = "id, area_id, name, scan_frequency, custom_id"


def _checkpoint_from_row(row: dict[str, object]) -> Checkpoint:
    return Checkpoint(
        id=str(row["id"]),
        area_id=str(row["area_id"]),
        name=str(row["name"]),
        scan_frequency=int(row.get("scan_frequency") or 1),
        custom_id=row.get("custom_id"),
    )
