"""Viewer and exporter for Anki .apkg flashcard packages."""

__version__ = "0.1.0"
