"""Logging setup for kbinventory."""
