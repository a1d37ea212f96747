"""Configuration module for the Euler Earn allocator."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
