"""Core library for workstyle's icon configuration.

Locates the per-user config file, resolves the ordered icon mapping and the
fallback icon, and falls back to the bundled defaults when the file is unusable.
"""

__all__ = [
    "config",
    "errors",
]
