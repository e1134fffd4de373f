"""Dependency injection container assembly utilities."""

from convo_client.dependency_injection.container import build_container

__all__ = ["build_container"]
