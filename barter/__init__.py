"""Barter: skill swap requests, conversations and ratings."""

__version__ = "0.1.0"
