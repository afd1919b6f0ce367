# Error taxonomy shared by services and routes
from typing import Optional, Any

class ScanDashboardError(Exception):
    """Base error; `error` is the public message, `details` is extra context for the caller."""
    status_code = 500
    default_error = 'Internal server error'

    def __init__(self, error: Optional[str] = None, details: Any = None):
        self.error = error or self.default_error
        self.details = details
        super().__init__(self.error if details is None else f'{self.error}: {details}')

    def to_response(self) -> dict:
        return {'error': self.error, 'details': self.details}

class NotFound(ScanDashboardError):
    status_code = 404
    default_error = 'Scan not found'

class BackendUnavailable(ScanDashboardError):
    default_error = 'Scanning backend unavailable'

    def __init__(self, error: Optional[str] = None, details: Any = None, upstream_status: Optional[int] = None):
        super().__init__(error, details)
        # Status code returned by the backend, if it answered at all
        self.upstream_status = upstream_status

class InvalidResponse(ScanDashboardError):
    default_error = 'Invalid response from scanning backend'

class StoreError(ScanDashboardError):
    default_error = 'Status store error'
