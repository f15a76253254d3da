"""Command-line interface for redis-session-manager."""
