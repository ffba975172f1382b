"""HTTP API for the Interview Prep platform."""

from .app import create_app

__all__ = ["create_app"]
