# Dashboard API client - async wrapper over the HTTP routes
import httpx
import logging
from typing import Optional, List, Any
from schemas.scan import ScanSummary, ScanDetails, ScanStatusRecord, ScanCreated
from schemas.report import GeneratedReport, ReportSummary
from schemas.dashboard import DashboardStats

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:8000/api'


class DashboardAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DashboardClient:
    """Async client for the scan dashboard API"""

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip('/'),
            timeout=timeout,
            transport=transport,
            headers={'Accept': 'application/json'}
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, action: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise DashboardAPIError(f'Failed to {action}: {e}') from e

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise DashboardAPIError(f'Failed to {action}', status_code=response.status_code, body=body)
        return response.json()

    async def get_scans(self) -> List[ScanSummary]:
        data = await self._request('GET', '/scans', 'fetch scans')
        return [ScanSummary.model_validate(item) for item in data]

    async def get_scan_details(self, scan_id: str) -> ScanDetails:
        data = await self._request('GET', f'/scans/{scan_id}', 'fetch scan details')
        return ScanDetails.model_validate(data)

    async def get_scan_status(self, scan_id: str) -> ScanStatusRecord:
        data = await self._request('GET', f'/scans/{scan_id}/status', 'fetch scan status')
        return ScanStatusRecord.model_validate(data)

    async def create_scan(self, company_name: str, domain: str) -> ScanCreated:
        data = await self._request('POST', '/scans', 'create scan', json={
            'companyName': company_name,
            'domain': domain
        })
        return ScanCreated.model_validate(data)

    async def rerun_scan(self, scan_id: str) -> ScanCreated:
        data = await self._request('POST', f'/scans/{scan_id}/rerun', 'rerun scan')
        return ScanCreated.model_validate(data)

    async def get_artifacts(self, scan_id: str) -> Any:
        return await self._request('GET', f'/scans/{scan_id}/artifacts', 'fetch artifacts')

    async def generate_report(self, scan_id: str, tags: Optional[List[str]] = None) -> GeneratedReport:
        data = await self._request('POST', f'/scans/{scan_id}/report', 'generate report', json={
            'tags': list(tags or [])
        })
        return GeneratedReport.model_validate(data)

    async def get_reports(self) -> List[ReportSummary]:
        data = await self._request('GET', '/reports', 'fetch reports')
        return [ReportSummary.model_validate(item) for item in data]

    async def get_dashboard_stats(self) -> DashboardStats:
        data = await self._request('GET', '/dashboard/stats', 'fetch dashboard stats')
        return DashboardStats.model_validate(data)
