"""Utility modules for siggenie."""

from siggenie.utils.fileio import (
    atomic_write_json,
    atomic_write_csv,
)

__all__ = [
    'atomic_write_json',
    'atomic_write_csv',
]
