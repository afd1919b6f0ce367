import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from config.database import get_database
from config.settings import Settings
from routes.dependencies import get_scanner_client
from schemas.finding import FindingRecord, ArtifactRecord
from schemas.scan import ScanStatusRecord
from server import app
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient

SCANNER_URL = 'http://scanner.test'
BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class FakeBackend:
    """Scripted scanning backend served through httpx.MockTransport"""

    def __init__(self):
        self.requests = []
        self._responses = {}

    def respond(self, method, path, status_code=200, json=None, error=None):
        """Queue a response; the last queued response for a route keeps being served"""
        self._responses.setdefault((method, path), []).append((status_code, json, error))

    def calls(self, method, path):
        return len([r for r in self.requests if r.method == method and r.url.path == path])

    def handler(self, request):
        self.requests.append(request)
        queue = self._responses.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={'error': 'Not found'})
        status_code, body, error = queue[0] if len(queue) == 1 else queue.pop(0)
        if error is not None:
            raise error('scanning backend unreachable', request=request)
        return httpx.Response(status_code, json=body)


def make_status(scan_id, status='queued', minutes=0, **fields):
    fields.setdefault('company_name', 'Acme')
    fields.setdefault('domain', 'acme.com')
    fields.setdefault('created_at', BASE_TIME + timedelta(minutes=minutes))
    return ScanStatusRecord(scan_id=scan_id, status=status, **fields)


def make_finding(scan_id, severity, minutes=0, **fields):
    fields.setdefault('type', 'exposed_service')
    fields.setdefault('description', f'{severity} finding')
    return FindingRecord(
        scan_id=scan_id,
        severity=severity,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **fields
    )


def make_artifact(scan_id, module, type='finding', **fields):
    return ArtifactRecord(scan_id=scan_id, module=module, type=type, **fields)


@pytest.fixture
def settings():
    return Settings(scanner_api_url=SCANNER_URL, scanner_connect_retries=0)


@pytest.fixture
def db():
    return AsyncMongoMockClient()['scan_dashboard_test']


@pytest.fixture
def store(db):
    return ScanStore(db)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def scanner(settings, backend):
    return ScannerClient(settings, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def seed(db):
    """Insert status, finding and artifact records straight into the store"""
    def _seed(*records):
        async def insert():
            for record in records:
                if isinstance(record, ScanStatusRecord):
                    await db.scan_status.insert_one(record.to_document())
                elif isinstance(record, FindingRecord):
                    await db.findings.insert_one(record.to_document())
                elif isinstance(record, ArtifactRecord):
                    await db.artifacts.insert_one(record.to_document())
        asyncio.run(insert())
    return _seed


@pytest.fixture
def client(db, scanner):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_scanner_client] = lambda: scanner
    yield TestClient(app)
    app.dependency_overrides.clear()
