"""HTTP API for LandingQA."""

from .main import create_app, run_web_server, saved_upload

__all__ = ["create_app", "run_web_server", "saved_upload"]
