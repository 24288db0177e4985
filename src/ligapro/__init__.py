"""LigaPro - league manager for recurring tournaments with points and Elo rankings."""

__version__ = "0.1.0"
