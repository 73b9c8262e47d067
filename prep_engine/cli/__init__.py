"""Command line interface for the prep engine."""
