"""Command-line interface for ebookkit."""
