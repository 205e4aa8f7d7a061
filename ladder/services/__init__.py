"""
Services package for the rating ladder.
"""

from .record_locks import KeyedLockRegistry

__all__ = ['KeyedLockRegistry']
