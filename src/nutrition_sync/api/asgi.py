"""ASGI entrypoint for the sync document server."""

from nutrition_sync.api.app import create_app
from nutrition_sync.containers import build_server_container

app = create_app(build_server_container())
