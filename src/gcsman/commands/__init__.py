"""Command modules for gcsman."""

from . import bucket, config, objects

__all__ = ["bucket", "config", "objects"]
