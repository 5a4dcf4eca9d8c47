"""Shared telemetry: logging setup."""

from cached_api.shared.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
