"""ASGI entrypoint for the Pantry Lens API."""

from pantry_lens.api.app import create_app
from pantry_lens.containers import build_container

app = create_app(build_container())
