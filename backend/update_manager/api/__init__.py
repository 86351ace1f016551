"""API module initialization."""

from . import agent, devices, errors, metrics, rollouts

__all__ = ["agent", "devices", "errors", "metrics", "rollouts"]
