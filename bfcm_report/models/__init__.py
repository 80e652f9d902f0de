"""
Frozen pydantic models.

metrics : Source payload models (CoreMetrics, PeakGMV, ...).
request : FetchRequest + window-length check.
report  : AggregateResult, DerivedMetrics, rule-engine output, BusinessReport.
"""
