"""Code store adapters - One-time code storage implementations."""

from .memory import InMemoryCodeStore

__all__ = ["InMemoryCodeStore"]
