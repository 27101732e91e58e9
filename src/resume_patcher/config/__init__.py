"""Configuration for the resume patcher."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
