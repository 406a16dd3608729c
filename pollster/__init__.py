"""Pollster: organizations, votes and questions with per-user change tracking."""

from .main import create_application

__all__ = ["create_application"]
