"""
Models package - Data models for the book viewer
"""

from .enums import PartKind, PartState, PlaybackDirection, TransitionOutcome, LogLevel, LogCategory

__all__ = [
    'PartKind',
    'PartState',
    'PlaybackDirection',
    'TransitionOutcome',
    'LogLevel',
    'LogCategory',
]
