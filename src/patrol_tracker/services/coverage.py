"""Checkpoint coverage for a patrol session."""

from dataclasses import dataclass

from patrol_tracker.domain.patrols import PatrolSession, PatrolStatus


@dataclass(frozen=True)
class Coverage:
    """Share of an area's checkpoints visited in a session."""

    unique_scanned: int
    total: int
    percent: float
    status: PatrolStatus

    @property
    def missed(self) -> int:
        return max(self.total - self.unique_scanned, 0)


def compute_coverage(session: PatrolSession, total_checkpoints: int) -> Coverage:
    """Compute coverage and the terminal status for a session."""
    unique_scanned = len({scan.checkpoint_id for scan in session.scans})
    total = max(total_checkpoints, 0)
    percent = 0.0 if total == 0 else min(100.0, 100.0 * unique_scanned / total)
    status = (
        PatrolStatus.COMPLETED
        if unique_scanned == total
        else PatrolStatus.MISSED_POINTS
    )
    return Coverage(
        unique_scanned=unique_scanned,
        total=total,
        percent=percent,
        status=status,
    )
