"""Shared telemetry: logging setup."""

from omni.shared.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
