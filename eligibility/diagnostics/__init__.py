"""Diagnostics package: optional, opt-in via env switches."""

from .metrics import log_fill_rates, log_lookup_misses

__all__ = [
    "log_fill_rates",
    "log_lookup_misses",
]
