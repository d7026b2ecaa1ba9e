from __future__ import annotations


class CrispCacheError(RuntimeError):
    pass


class ConfigurationError(CrispCacheError, ValueError):
    """Invalid surface geometry or configuration value."""


class ResourceExhaustionError(CrispCacheError, MemoryError):
    """Raster allocation was refused or failed."""
