"""Common utility functions."""

from .datetimes import combine_departure

__all__ = [
    "combine_departure",
]
