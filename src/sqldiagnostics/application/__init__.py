"""
Application layer: run orchestration and scheduling.
"""

from sqldiagnostics.application.report_service import ReportService, RunReport, artifact_name
from sqldiagnostics.application.schedule import RepeatSchedule

__all__ = ["RepeatSchedule", "ReportService", "RunReport", "artifact_name"]
