"""Client library and CLI for the student mental-health services intake workflow."""

__version__ = "0.1.0"
