"""Command-line interface for the student intake client."""

from student_intake.cli.main import app, main

__all__ = ["app", "main"]
