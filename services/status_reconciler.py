"""
Status reconciliation between the status store and the scanning backend.

The store is the source of truth once a scan is queued; the backend is asked
for live progress only while the stored status is non-terminal. Precedence
rules for the merge live in `merge_status`.
"""
import logging
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import ValidationError
from schemas.base import utc_now
from schemas.scan import ScanState, ScanStatusRecord, BackendStatus
from services.errors import NotFound, BackendUnavailable, InvalidResponse, ScanDashboardError
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient

logger = logging.getLogger(__name__)

BACKEND_STATUS_MAP = {
    'queued': ScanState.QUEUED,
    'running': ScanState.RUNNING,
    'processing': ScanState.RUNNING,
    'completed': ScanState.COMPLETED,
    'done': ScanState.COMPLETED,
    'failed': ScanState.FAILED,
    'error': ScanState.FAILED
}


def map_backend_status(raw_status: Optional[str]) -> ScanState:
    """Map the backend's vocabulary onto local states; anything unknown is still in progress."""
    if not raw_status:
        return ScanState.RUNNING
    return BACKEND_STATUS_MAP.get(str(raw_status).strip().lower(), ScanState.RUNNING)


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_backend_status(payload: Dict[str, Any]) -> BackendStatus:
    raw_status = payload.get('state', payload.get('status'))
    if raw_status is not None and not isinstance(raw_status, str):
        raise InvalidResponse(details=f'Unexpected status value: {raw_status!r}')

    try:
        return BackendStatus(
            status=map_backend_status(raw_status),
            raw_status=raw_status,
            progress=_optional_int(payload.get('progress')),
            current_module=payload.get('currentModule', payload.get('current_module')),
            total_modules=_optional_int(payload.get('totalModules', payload.get('total_modules'))),
            error=payload.get('error') or payload.get('errorMessage') or payload.get('error_message')
        )
    except ValidationError as e:
        raise InvalidResponse(details=f'Malformed status payload: {e}') from e


def merge_status(
    stored: ScanStatusRecord,
    live: BackendStatus,
    now: Optional[datetime] = None
) -> ScanStatusRecord:
    """
    Merge a stored record with a live backend reading.

    - progress, current module and module count come from the backend when it reports them
    - company name, domain and creation time always come from the store
    - error message is set only when the merged status is failed
    - completed_at is stamped when the merged status is terminal and the stored one was not
    """
    now = now or utc_now()
    status = ScanState(live.status).value

    progress = live.progress if live.progress is not None else stored.progress
    progress = max(0, min(100, progress))
    if status == ScanState.COMPLETED.value:
        progress = 100

    error_message = None
    if status == ScanState.FAILED.value:
        error_message = str(live.error) if live.error else 'Scan failed'

    merged = stored.model_copy(update={
        'status': status,
        'progress': progress,
        'current_module': live.current_module if live.current_module is not None else stored.current_module,
        'total_modules': live.total_modules if live.total_modules is not None else stored.total_modules,
        'error_message': error_message,
        'last_updated_at': now
    })

    if merged.is_terminal and not stored.is_terminal:
        merged.completed_at = now

    return merged


class StatusReconciler:
    """Produces an up-to-date status record without regressing terminal states"""

    def __init__(self, store: ScanStore, scanner: ScannerClient):
        self.store = store
        self.scanner = scanner

    async def get_status(self, scan_id: str) -> ScanStatusRecord:
        stored = await self.store.get_status(scan_id)
        if stored is None:
            raise NotFound(details=f'No scan found with ID: {scan_id}')

        if stored.is_terminal:
            logger.debug(f'Scan {scan_id} is {stored.status}; returning stored status')
            return stored

        try:
            payload = await self.scanner.get_status(scan_id)
            live = parse_backend_status(payload)
        except (BackendUnavailable, InvalidResponse) as e:
            logger.warning(f'Live status unavailable for scan {scan_id}, serving stored status: {e}')
            return stored

        merged = merge_status(stored, live)

        try:
            await self.store.upsert_status(merged)
        except ScanDashboardError as e:
            logger.error(f'Failed to persist reconciled status for scan {scan_id}: {e}')

        if merged.status != stored.status:
            logger.info(f'Scan {scan_id} moved from {stored.status} to {merged.status} ({merged.progress}%)')

        return merged
