"""Shared logging helpers."""

from __future__ import annotations

from .logging import JsonLogFormatter, configure_logger

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]
