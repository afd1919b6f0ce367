# Scanning backend client - starts scans and reads live progress, artifacts and reports
import httpx
import logging
from typing import Optional, Dict, Any, List
from config.settings import Settings
from services.errors import BackendUnavailable, InvalidResponse

logger = logging.getLogger(__name__)


def extract_scan_id(payload: Any) -> str:
    """Pull the backend-assigned scan identifier out of a start/rerun response."""
    if isinstance(payload, dict):
        for key in ('scanId', 'scan_id', 'newScanId', 'id'):
            value = payload.get(key)
            if value:
                return str(value)
    raise InvalidResponse(details='Scanning backend did not return a scan id')


class ScannerClient:
    """HTTP client for the remote scan-execution service"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.scanner_api_url.rstrip('/')
        self.timeout = settings.scanner_timeout_seconds
        self.connect_retries = settings.scanner_connect_retries
        self._transport = transport
        self.headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        }

    def _client(self) -> httpx.AsyncClient:
        # A client closes its transport on exit, so a fresh one is built per call
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self.connect_retries)
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.headers,
            transport=transport
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f'Scanning backend {method} {path} failed: {e!r}')
            raise BackendUnavailable(details=str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning(f'Scanning backend {method} {path} returned {response.status_code}')
            raise BackendUnavailable(
                f'Backend API failed with status: {response.status_code}',
                details=response.text,
                upstream_status=response.status_code
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponse(details=f'Malformed JSON from scanning backend: {e}') from e

    async def start_scan(self, company_name: str, domain: str) -> str:
        """Start a scan and return the backend-assigned scan id"""
        response = await self._request('POST', '/scan', json={
            'companyName': company_name,
            'domain': domain
        })
        scan_id = extract_scan_id(self._json(response))
        logger.info(f'Scanning backend accepted scan {scan_id} for {domain}')
        return scan_id

    async def rerun_scan(self, scan_id: str) -> str:
        response = await self._request('POST', f'/scan/{scan_id}/rerun')
        new_scan_id = extract_scan_id(self._json(response))
        logger.info(f'Scanning backend reran scan {scan_id} as {new_scan_id}')
        return new_scan_id

    async def get_status(self, scan_id: str) -> Dict[str, Any]:
        """Live status payload for a scan, e.g. {"state": "running", "progress": 40}"""
        response = await self._request('GET', f'/scan/{scan_id}/status')
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise InvalidResponse(details='Status payload is not an object')
        return payload

    async def get_artifacts(self, scan_id: str) -> Any:
        response = await self._request('GET', f'/scan/{scan_id}/artifacts')
        return self._json(response)

    async def get_report(self, scan_id: str, tags: Optional[List[str]] = None) -> Dict[str, Any]:
        params = [('tags', tag) for tag in tags or []]
        response = await self._request('GET', f'/scan/{scan_id}/report', params=params)
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise InvalidResponse(details='Report payload is not an object')
        return payload
