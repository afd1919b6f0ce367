from schemas.finding import FindingRecord, ArtifactRecord, Severity, severity_rank
from schemas.scan import (
    ScanState, ScanStatusRecord, ScanCreate, ScanCreated, ScanSummary,
    ScanDetails, ModuleStatus, BackendStatus, TERMINAL_STATES, SECURITY_MODULES
)
from schemas.report import ReportRequest, ReportRecord, GeneratedReport, ReportSummary
from schemas.dashboard import DashboardStats

__all__ = [
    'FindingRecord', 'ArtifactRecord', 'Severity', 'severity_rank',
    'ScanState', 'ScanStatusRecord', 'ScanCreate', 'ScanCreated', 'ScanSummary',
    'ScanDetails', 'ModuleStatus', 'BackendStatus', 'TERMINAL_STATES', 'SECURITY_MODULES',
    'ReportRequest', 'ReportRecord', 'GeneratedReport', 'ReportSummary',
    'DashboardStats'
]
