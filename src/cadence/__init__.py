"""Cadence: SM-2 spaced-repetition scheduling for flashcards."""

from cadence.consts import VERSION

__version__ = VERSION
