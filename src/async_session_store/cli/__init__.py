"""Command-line interface for async-session-store."""
