"""Dependency injection wiring."""

from .container import ProvidersContainer, build_container, build_strategies

__all__ = ["ProvidersContainer", "build_container", "build_strategies"]
