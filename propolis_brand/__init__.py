"""propolis zone brand package."""

__all__ = [
    "cli",
    "config",
    "constants",
    "exceptions",
    "host",
    "layout",
    "lifecycle",
    "models",
    "network",
    "state",
    "supervisor",
    "utils",
]
