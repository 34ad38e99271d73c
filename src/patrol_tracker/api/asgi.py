"""ASGI entrypoint for the patrol tracker API."""

from patrol_tracker.api.app import create_app
from patrol_tracker.containers import build_container

app = create_app(build_container())
