"""
BFCM merchant report pipeline.

Subpackages
-----------
sources   : SourceFetcherSet ABC + fixture and HTTP implementations.
pipeline  : Fetch tasks, settle-all orchestrator, report assembly.
metrics   : Pure derived-metrics engine (YoY, ratios, performance score).
insights  : Threshold ladders, insights, narrative, recommendations,
            badges and personalities.
models    : Frozen pydantic models for payloads, requests and reports.
reporting : Plain-text formatters for the CLI.
"""

__version__ = "0.1.0"
