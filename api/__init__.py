"""HTTP surface for the AI service."""

from api.app import create_app

__all__ = ["create_app"]
