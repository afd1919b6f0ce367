# Scan service - starts scans at the scanning backend and records their initial status
import asyncio
import logging
from schemas.scan import ScanState, ScanStatusRecord, ScanCreated
from services.errors import NotFound, StoreError
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient

logger = logging.getLogger(__name__)

STORE_RETRY_DELAY_SECONDS = 0.5


class ScanService:
    def __init__(self, store: ScanStore, scanner: ScannerClient, write_attempts: int = 3,
                 retry_delay: float = STORE_RETRY_DELAY_SECONDS):
        self.store = store
        self.scanner = scanner
        self.write_attempts = max(1, write_attempts)
        self.retry_delay = retry_delay

    async def create_scan(self, company_name: str, domain: str) -> ScanCreated:
        """Start a scan at the backend, then write its queued status record"""
        scan_id = await self.scanner.start_scan(company_name, domain)
        stored = await self._store_initial_status(scan_id, company_name, domain)
        return ScanCreated(scan_id=scan_id, status_stored=stored)

    async def rerun_scan(self, scan_id: str) -> ScanCreated:
        """Run a previous scan again under a new backend-assigned id"""
        previous = await self.store.get_status(scan_id)
        if previous is None:
            raise NotFound(details=f'No scan found with ID: {scan_id}')

        new_scan_id = await self.scanner.rerun_scan(scan_id)
        stored = await self._store_initial_status(new_scan_id, previous.company_name, previous.domain)
        return ScanCreated(scan_id=new_scan_id, status_stored=stored)

    async def _store_initial_status(self, scan_id: str, company_name: str, domain: str) -> bool:
        record = ScanStatusRecord(
            scan_id=scan_id,
            company_name=company_name,
            domain=domain,
            status=ScanState.QUEUED,
            progress=0,
            current_module='Initializing',
            total_modules=0
        )
        record.last_updated_at = record.created_at

        # Scan is already running at the backend; failures are retried, then reported via status_stored
        for attempt in range(1, self.write_attempts + 1):
            try:
                await self.store.upsert_status(record)
                return True
            except StoreError as e:
                logger.warning(f'Storing status for scan {scan_id} failed (attempt {attempt}/{self.write_attempts}): {e}')
                if attempt < self.write_attempts:
                    await asyncio.sleep(self.retry_delay)

        logger.error(f'Scan {scan_id} is running but its status record could not be stored')
        return False
