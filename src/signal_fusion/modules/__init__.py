"""Analysis module framework."""

from signal_fusion.modules.base import SignalModule
from signal_fusion.modules.registry import MODULE_REGISTRY, register

__all__ = ["MODULE_REGISTRY", "SignalModule", "register"]
