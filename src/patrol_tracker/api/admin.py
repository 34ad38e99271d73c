"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from patrol_tracker.api.serializers import serialize_coverage, serialize_session

if TYPE_CHECKING:
    from patrol_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/patrols", dependencies=[Depends(require_admin)])
async def list_active_patrols(request: Request) -> dict[str, object]:
    """Return patrols currently running in this process."""
    container: AppContainer = request.app.state.container
    return {
        "patrols": [
            {
                "patrol": serialize_session(patrol.session),
                "coverage": serialize_coverage(patrol.coverage()),
                "autosave_running": bool(patrol.autosave and patrol.autosave.running),
            }
            for patrol in container.patrol_registry.active()
        ]
    }


@router.get("/reports", dependencies=[Depends(require_admin)])
async def list_reports(
    request: Request, limit: int | None = None, officer: str | None = None
) -> dict[str, object]:
    """Return persisted patrol reports, newest first."""
    container: AppContainer = request.app.state.container
    page_size = limit or container.settings.reports_page_size
    reports = container.patrol_service.list_reports(page_size, officer=officer)
    return {"reports": [serialize_session(report) for report in reports]}


@router.get("/reports/{report_id}", dependencies=[Depends(require_admin)])
async def get_report(report_id: str, request: Request) -> dict[str, object]:
    """Return one persisted patrol report."""
    container: AppContainer = request.app.state.container
    report = container.patrol_service.get_report(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"report": serialize_session(report)}


@router.get("/dashboard", dependencies=[Depends(require_admin)])
async def dashboard(request: Request) -> dict[str, object]:
    """Return the site count and recently finished patrols."""
    container: AppContainer = request.app.state.container
    summary = container.patrol_service.dashboard()
    return {
        "site_count": summary.site_count,
        "recent_patrols": [
            serialize_session(report) for report in summary.recent_patrols
        ],
    }


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


_ADMIN_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Patrol Tracker Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Patrol Tracker Admin</h1>
    <div class="row">
      <label>Admin token</label><br />
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <button onclick="loadEndpoint('/admin/patrols')">Active patrols</button>
      <button onclick="loadEndpoint('/admin/dashboard')">Dashboard</button>
      <button onclick="loadEndpoint('/admin/reports')">Reports</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      async function loadEndpoint(path) {
        const token = document.getElementById('token').value;
        const output = document.getElementById('output');
        output.textContent = 'Loading...';
        const res = await fetch(path, {
          headers: { 'X-Admin-Token': token }
        });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }
    </script>
  </body>
</html>
"""
