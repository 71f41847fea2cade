"""Utility helpers: text handling, upload validation, fault isolation."""
