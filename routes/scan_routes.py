# Scan routes
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from typing import List
import logging
import time
from schemas.scan import ScanCreate, ScanCreated, ScanSummary, ScanDetails, ScanStatusRecord
from services.errors import BackendUnavailable
from services.scanner_client import ScannerClient
from services.status_reconciler import StatusReconciler
from services.scan_aggregator import ScanAggregator
from services.scan_service import ScanService
from routes.dependencies import (
    get_scanner_client,
    get_status_reconciler,
    get_scan_aggregator,
    get_scan_service
)

router = APIRouter(prefix='/scans', tags=['Scans'])
logger = logging.getLogger(__name__)

def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)

@router.get('', response_model=List[ScanSummary])
async def list_scans(aggregator: ScanAggregator = Depends(get_scan_aggregator)):
    """List scans newest first with finding totals and max severity"""
    started = time.perf_counter()
    scans = await aggregator.list_scans()
    logger.info(f'Listed {len(scans)} scans in {elapsed_ms(started)}ms')
    return scans

@router.post('', response_model=ScanCreated, status_code=status.HTTP_201_CREATED)
async def create_scan(
    scan_request: ScanCreate,
    scan_service: ScanService = Depends(get_scan_service)
):
    """Start a scan at the scanning backend and record it as queued"""
    started = time.perf_counter()
    logger.info(f'Creating scan for {scan_request.company_name} ({scan_request.domain})')
    created = await scan_service.create_scan(scan_request.company_name, scan_request.domain)
    logger.info(f'Created scan {created.scan_id} in {elapsed_ms(started)}ms (status stored: {created.status_stored})')
    return created

@router.get('/{scan_id}', response_model=ScanDetails)
async def get_scan(
    scan_id: str,
    aggregator: ScanAggregator = Depends(get_scan_aggregator)
):
    """Scan status with findings and per-module progress"""
    started = time.perf_counter()
    details = await aggregator.get_scan_detail(scan_id)
    logger.info(f'Fetched details for scan {scan_id} in {elapsed_ms(started)}ms: '
                f'{details.total_findings} findings, max severity {details.max_severity}')
    return details

@router.get('/{scan_id}/status', response_model=ScanStatusRecord)
async def get_scan_status(
    scan_id: str,
    reconciler: StatusReconciler = Depends(get_status_reconciler)
):
    """Status reconciled against the scanning backend"""
    started = time.perf_counter()
    record = await reconciler.get_status(scan_id)
    logger.info(f'Status for scan {scan_id} is {record.status} ({record.progress}%) in {elapsed_ms(started)}ms')
    return record

@router.post('/{scan_id}/rerun', response_model=ScanCreated, status_code=status.HTTP_201_CREATED)
async def rerun_scan(
    scan_id: str,
    scan_service: ScanService = Depends(get_scan_service)
):
    """Run a previous scan again for the same company and domain"""
    created = await scan_service.rerun_scan(scan_id)
    logger.info(f'Scan {scan_id} rerun as {created.scan_id}')
    return created

@router.get('/{scan_id}/artifacts')
async def get_scan_artifacts(
    scan_id: str,
    scanner: ScannerClient = Depends(get_scanner_client)
):
    """Proxy the scanning backend's artifact listing verbatim"""
    started = time.perf_counter()
    try:
        artifacts = await scanner.get_artifacts(scan_id)
    except BackendUnavailable as e:
        if e.upstream_status is None:
            raise
        return JSONResponse(status_code=e.upstream_status, content=e.to_response())

    count = len(artifacts) if isinstance(artifacts, list) else 0
    logger.info(f'Proxied {count} artifacts for scan {scan_id} in {elapsed_ms(started)}ms')
    return artifacts
