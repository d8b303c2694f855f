"""
Station sources

- amg.py: AMG Radio (volna.top) - WordPress REST listing, static fallback
- ru101.py: 101.ru - HTML group pages, session cookie, internal JSON API
"""

from .base import BaseSource
from .amg import AmgSource
from .ru101 import Ru101Source

__all__ = [
    "BaseSource",
    "AmgSource",
    "Ru101Source",
]
