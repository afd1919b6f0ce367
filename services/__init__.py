from services.errors import ScanDashboardError, NotFound, BackendUnavailable, InvalidResponse, StoreError
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient
from services.status_reconciler import StatusReconciler
from services.scan_aggregator import ScanAggregator
from services.scan_service import ScanService
from services.report_service import ReportService

__all__ = [
    'ScanDashboardError', 'NotFound', 'BackendUnavailable', 'InvalidResponse', 'StoreError',
    'ScanStore',
    'ScannerClient',
    'StatusReconciler',
    'ScanAggregator',
    'ScanService',
    'ReportService'
]
