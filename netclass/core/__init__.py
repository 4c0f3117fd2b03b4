"""Core types, configuration and logging for netclass."""
