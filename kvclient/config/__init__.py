"""Configuration module for KV-Cache client."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
