# Dashboard routes
from fastapi import APIRouter, Depends
from datetime import timedelta
from schemas.base import utc_now
from schemas.dashboard import DashboardStats
from schemas.finding import Severity
from schemas.scan import ScanState, ACTIVE_STATES
from services.scan_store import ScanStore
from routes.dependencies import get_scan_store

router = APIRouter(prefix='/dashboard', tags=['Dashboard'])

@router.get('/stats', response_model=DashboardStats)
async def get_dashboard_stats(store: ScanStore = Depends(get_scan_store)):
    """Get scan and finding counts for the dashboard"""
    week_ago = utc_now() - timedelta(days=7)

    return DashboardStats(
        total_scans=await store.count_statuses(),
        active_scans=await store.count_statuses(ACTIVE_STATES),
        completed_scans=await store.count_statuses([ScanState.COMPLETED.value]),
        failed_scans=await store.count_statuses([ScanState.FAILED.value]),
        recent_scans=await store.count_statuses(created_since=week_ago),
        total_findings=await store.count_findings(),
        critical_findings=await store.count_findings(Severity.CRITICAL.value),
        high_findings=await store.count_findings(Severity.HIGH.value)
    )
