"""
Report pipeline.

tasks        : FetchTask + build_report_tasks() (14 tasks per report).
orchestrator : FetchOrchestrator (settle-all fan-out/fan-in), ProgressEvent,
               OrchestrationResult, AllSourcesFailedError.
report       : generate_report() / run_report() returning a BusinessReport.
"""
