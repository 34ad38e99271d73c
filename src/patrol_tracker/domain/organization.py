"""Domain models for the organizational hierarchy."""

from dataclasses import dataclass
from typing import Protocol


class OrgNode(Protocol):
    """Any node that can be printed on a checkpoint payload."""

    id: str
    custom_id: str | None


@dataclass(frozen=True)
class Company:
    """A client company."""

    id: str
    name: str
    custom_id: str | None = None


@dataclass(frozen=True)
class Site:
    """A physical site belonging to a company."""

    id: str
    company_id: str
    name: str
    address: str = ""
    custom_id: str | None = None


@dataclass(frozen=True)
class Area:
    """A patrolled area within a site."""

    id: str
    site_id: str
    name: str
    description: str = ""
    custom_id: str | None = None


@dataclass(frozen=True)
class Checkpoint:
    """A physical inspection point inside an area."""

    id: str
    area_id: str
    name: str
    scan_frequency: int = 1
    custom_id: str | None = None
