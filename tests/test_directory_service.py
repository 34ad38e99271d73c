"""Tests for directory snapshots."""

from patrol_tracker.domain.organization import Area
from patrol_tracker.services.directory import DirectoryService
from tests.conftest import InMemoryDirectoryRepository


def test_snapshot_indexes_area_checkpoints() -> None:
    service = DirectoryService(InMemoryDirectoryRepository.seeded())

    snapshot = service.snapshot("comp1", "site1", "area1")

    assert snapshot is not None
    assert snapshot.total_checkpoints == 3
    assert snapshot.lookup("point-b") is not None
    assert snapshot.lookup("point-g") is None


def test_snapshot_requires_linked_route() -> None:
    repository = InMemoryDirectoryRepository.seeded()
    repository.areas["area9"] = Area(id="area9", site_id="other-site", name="Roof")
    service = DirectoryService(repository)

    assert service.snapshot("comp1", "site1", "area9") is None
    assert service.snapshot("comp2", "site1", "area1") is None


def test_checkpoint_context_walks_up_the_hierarchy() -> None:
    service = DirectoryService(InMemoryDirectoryRepository.seeded())

    context = service.checkpoint_context("point-g")

    assert context is not None
    company, site, area, checkpoint = context
    assert (company.id, site.id, area.id, checkpoint.id) == (
        "comp1",
        "site1",
        "area2",
        "point-g",
    )
    assert service.checkpoint_context("missing") is None
