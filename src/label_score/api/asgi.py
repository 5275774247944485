"""ASGI entrypoint for the label score API."""

from label_score.api.app import create_app
from label_score.containers import build_container

app = create_app(build_container())
