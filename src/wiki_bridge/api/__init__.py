# HTTP API exposing the solver

from .app import create_app

__all__ = ["create_app"]
