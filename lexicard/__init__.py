"""Lexicard - spaced-repetition vocabulary trainer."""

__version__ = "0.1.0"
