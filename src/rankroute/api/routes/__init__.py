"""Route group exports."""

from . import health, ranks, routes

__all__ = ["health", "ranks", "routes"]
