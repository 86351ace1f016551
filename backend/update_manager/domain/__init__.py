"""Domain layer primitives (value objects, rules, exceptions)."""

from . import compliance, devices, exceptions, rollouts, tasks

__all__ = ["compliance", "devices", "exceptions", "rollouts", "tasks"]
