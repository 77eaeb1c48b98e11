"""Command-line commands for pltsync."""
