"""Seat, slot and membership management for a self-study library."""

__version__ = "3.1.0"
