"""Arknights: Endfield daily check-in through the SKPort API."""

__version__ = "0.1.0"
