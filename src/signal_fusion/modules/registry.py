"""Module registry — decorated classes are auto-registered."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from signal_fusion.modules.base import SignalModule

MODULE_REGISTRY: dict[str, type[SignalModule]] = {}


def register(cls: type[SignalModule]) -> type[SignalModule]:
    """Class decorator that adds an analysis module to the global registry."""
    if not getattr(cls, "name", None):
        raise ValueError(f"Module class {cls.__name__} must define a 'name' attribute")
    if cls.name in MODULE_REGISTRY:
        raise ValueError(f"Duplicate module name: {cls.name!r}")
    MODULE_REGISTRY[cls.name] = cls
    return cls
