"""Armor-plate geometry, light-bar pairing, serial frames and target tracking."""

__version__ = "0.1.0"

__all__ = [
    "diagnostics",
    "framelog",
    "geometry",
    "matching",
    "protocol",
    "status",
    "tracker",
]