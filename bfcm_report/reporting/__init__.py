"""
Report output.

formatters : Value formatters + format_report_text() for the CLI.
"""
