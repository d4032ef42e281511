"""Relay configuration model."""

from .model import RelayConfig  # noqa: F401

__all__ = ["RelayConfig"]
