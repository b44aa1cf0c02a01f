"""Shared utilities: datetime and id generators."""

from omni.shared.utils.datetime import ensure_utc, seconds_until, utc_now
from omni.shared.utils.generators import generate_cuid

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "seconds_until",
    "utc_now",
]
