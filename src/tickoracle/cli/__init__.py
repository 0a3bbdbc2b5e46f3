"""Command-line interface for tickoracle."""
