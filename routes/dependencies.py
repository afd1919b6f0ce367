# Route dependencies - services wired from settings and the database
from fastapi import Depends
from config.database import get_database
from config.settings import Settings, get_settings
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient
from services.status_reconciler import StatusReconciler
from services.scan_aggregator import ScanAggregator
from services.scan_service import ScanService
from services.report_service import ReportService

def get_scanner_client(settings: Settings = Depends(get_settings)) -> ScannerClient:
    return ScannerClient(settings)

async def get_scan_store(db = Depends(get_database)) -> ScanStore:
    return ScanStore(db)

def get_status_reconciler(
    store: ScanStore = Depends(get_scan_store),
    scanner: ScannerClient = Depends(get_scanner_client)
) -> StatusReconciler:
    return StatusReconciler(store, scanner)

def get_scan_aggregator(
    store: ScanStore = Depends(get_scan_store),
    settings: Settings = Depends(get_settings)
) -> ScanAggregator:
    return ScanAggregator(store, list_limit=settings.scans_list_limit)

def get_scan_service(
    store: ScanStore = Depends(get_scan_store),
    scanner: ScannerClient = Depends(get_scanner_client),
    settings: Settings = Depends(get_settings)
) -> ScanService:
    return ScanService(store, scanner, write_attempts=settings.status_store_write_attempts)

def get_report_service(
    store: ScanStore = Depends(get_scan_store),
    scanner: ScannerClient = Depends(get_scanner_client)
) -> ReportService:
    return ReportService(store, scanner)
