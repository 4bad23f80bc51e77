"""Shared utilities (I/O, text, merging)."""
