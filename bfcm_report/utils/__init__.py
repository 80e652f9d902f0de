"""
Shared utilities.

logging    : configure_logging() for CLI entry.
time_utils : Comparison windows, window validation, peak-minute clock.
"""
