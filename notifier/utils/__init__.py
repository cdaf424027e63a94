"""Utility modules for the notification worker"""

from .logger import setup_logging
from .timeutil import parse_timestamp, utcnow

__all__ = [
    'parse_timestamp',
    'setup_logging',
    'utcnow',
]
