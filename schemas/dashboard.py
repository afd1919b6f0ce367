# Dashboard schemas
from schemas.base import CamelModel

class DashboardStats(CamelModel):
    total_scans: int
    active_scans: int
    completed_scans: int
    failed_scans: int
    recent_scans: int
    total_findings: int
    critical_findings: int
    high_findings: int
