"""Command-line controller for web-overlay windows."""
