"""HTTP diagnostics surface."""

from signal_fusion.api.app import create_app

__all__ = ["create_app"]
