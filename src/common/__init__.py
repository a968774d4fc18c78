"""Helpers shared across gomodgate modules."""
