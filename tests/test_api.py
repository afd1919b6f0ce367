import asyncio
from datetime import timedelta

import httpx
from pymongo.errors import OperationFailure

from conftest import make_finding, make_status
from routes.dependencies import get_scan_store
from schemas.base import utc_now
from server import app
from services.scan_store import ScanStore, store_operation


def test_health(client):
    assert client.get('/health').json() == {'status': 'healthy'}
    assert client.get('/api/health').json()['status'] == 'healthy'


def test_create_then_poll_status(client, backend):
    backend.respond('POST', '/scan', json={'scanId': 's1'})
    backend.respond('GET', '/scan/s1/status', json={'state': 'running', 'progress': 40})

    resp = client.post('/api/scans', json={'companyName': 'Acme', 'domain': 'acme.com'})
    assert resp.status_code == 201
    assert resp.json() == {'scanId': 's1', 'statusStored': True}

    resp = client.get('/api/scans/s1/status')
    assert resp.status_code == 200
    body = resp.json()
    assert body['scanId'] == 's1'
    assert body['status'] == 'running'
    assert body['progress'] == 40
    assert body['companyName'] == 'Acme'

    listed = client.get('/api/scans').json()
    assert listed[0]['status'] == 'running'
    assert listed[0]['maxSeverity'] == 'INFO'


def test_create_scan_backend_failure(client, backend):
    backend.respond('POST', '/scan', status_code=502, json={'error': 'bad gateway'})

    resp = client.post('/api/scans', json={'companyName': 'Acme', 'domain': 'acme.com'})

    assert resp.status_code == 500
    assert resp.json()['error'] == 'Backend API failed with status: 502'


def test_create_scan_requires_fields(client):
    resp = client.post('/api/scans', json={'companyName': 'Acme'})
    assert resp.status_code == 422


def test_unknown_scan_is_404(client):
    resp = client.get('/api/scans/unknown-id')
    assert resp.status_code == 404
    assert resp.json()['error'] == 'Scan not found'

    resp = client.get('/api/scans/unknown-id/status')
    assert resp.status_code == 404
    assert resp.json()['error'] == 'Scan not found'


def test_list_scans_max_severity(client, seed):
    seed(
        make_status('s1', status='completed'),
        make_finding('s1', 'MEDIUM'),
        make_finding('s1', 'CRITICAL'),
    )

    scans = client.get('/api/scans').json()

    assert scans == [{
        'scanId': 's1',
        'companyName': 'Acme',
        'domain': 'acme.com',
        'status': 'completed',
        'progress': 0,
        'currentModule': None,
        'createdAt': scans[0]['createdAt'],
        'completedAt': None,
        'totalFindings': 2,
        'maxSeverity': 'CRITICAL'
    }]


def test_scan_detail(client, seed):
    seed(
        make_status('s1', status='running', progress=30),
        make_finding('s1', 'LOW', recommendation='Rotate the key'),
        make_finding('s1', 'HIGH'),
    )

    body = client.get('/api/scans/s1').json()

    assert body['scanId'] == 's1'
    assert [f['severity'] for f in body['findings']] == ['HIGH', 'LOW']
    assert body['findings'][1]['recommendation'] == 'Rotate the key'
    assert body['maxSeverity'] == 'HIGH'
    assert body['totalFindings'] == 2
    assert {m['status'] for m in body['modules']} == {'pending'}


def test_status_served_from_store_when_backend_down(client, backend, seed):
    seed(make_status('s1', status='running', progress=70))
    backend.respond('GET', '/scan/s1/status', error=httpx.ReadTimeout)

    resp = client.get('/api/scans/s1/status')

    assert resp.status_code == 200
    assert resp.json()['progress'] == 70


def test_rerun_scan(client, backend, seed):
    seed(make_status('s1', status='failed'))
    backend.respond('POST', '/scan/s1/rerun', json={'scanId': 's2'})

    resp = client.post('/api/scans/s1/rerun')

    assert resp.status_code == 201
    assert resp.json()['scanId'] == 's2'
    assert client.get('/api/scans/s2').json()['status'] == 'queued'


def test_artifacts_proxy(client, backend):
    artifacts = [{'id': 'a1', 'type': 'open_port', 'valText': '5432/tcp'}]
    backend.respond('GET', '/scan/s1/artifacts', json=artifacts)

    resp = client.get('/api/scans/s1/artifacts')

    assert resp.status_code == 200
    assert resp.json() == artifacts


def test_artifacts_proxy_forwards_backend_status(client, backend):
    backend.respond('GET', '/scan/s1/artifacts', status_code=404, json={'error': 'unknown scan'})

    resp = client.get('/api/scans/s1/artifacts')

    assert resp.status_code == 404
    assert resp.json()['error'] == 'Backend API failed with status: 404'


def test_artifacts_proxy_backend_unreachable(client, backend):
    backend.respond('GET', '/scan/s1/artifacts', error=httpx.ConnectError)

    resp = client.get('/api/scans/s1/artifacts')

    assert resp.status_code == 500
    assert resp.json()['error'] == 'Scanning backend unavailable'


def test_generate_and_view_hosted_report(client, backend, seed):
    seed(make_status('s1', status='completed'))
    backend.respond('GET', '/scan/s1/report', json={
        'reportUrl': 'https://reports.example.com/s1.pdf',
        'summary': {'critical': 1}
    })

    resp = client.post('/api/scans/s1/report', json={'tags': ['board', 'q4']})

    assert resp.status_code == 200
    body = resp.json()
    assert body['reportUrl'] == 'https://reports.example.com/s1.pdf'
    assert body['summary'] == {'critical': 1}
    assert body['reportId']
    assert body['generatedAt']
    assert backend.requests[-1].url.params.get_list('tags') == ['board', 'q4']

    resp = client.get('/api/scans/s1/report/view', follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers['location'] == 'https://reports.example.com/s1.pdf'


def test_view_report_content_as_html(client, backend, seed):
    seed(make_status('s1', status='completed', company_name='Acme <Labs>'))
    backend.respond('GET', '/scan/s1/report', json={'report': '# Findings\n<script>x</script>'})
    client.post('/api/scans/s1/report', json={'tags': []})

    resp = client.get('/api/scans/s1/report/view')

    assert resp.status_code == 200
    assert resp.headers['content-type'].startswith('text/html')
    assert 'Acme &lt;Labs&gt;' in resp.text
    assert '&lt;script&gt;x&lt;/script&gt;' in resp.text


def test_view_missing_report(client):
    resp = client.get('/api/scans/s1/report/view')
    assert resp.status_code == 404
    assert resp.json()['error'] == 'Report not found'


def test_report_for_unknown_scan(client, backend):
    resp = client.post('/api/scans/nope/report', json={'tags': []})
    assert resp.status_code == 404
    assert backend.requests == []


def test_report_without_url_or_content(client, backend, seed):
    seed(make_status('s1', status='completed'))
    backend.respond('GET', '/scan/s1/report', json={'summary': 'empty'})

    resp = client.post('/api/scans/s1/report', json={})

    assert resp.status_code == 500
    assert resp.json()['error'] == 'Invalid response from scanning backend'


def test_list_reports_newest_first(client, backend, seed):
    seed(make_status('s1', status='completed'), make_status('s2', status='completed'))
    backend.respond('GET', '/scan/s1/report', json={'report': 'first'})
    backend.respond('GET', '/scan/s2/report', json={'report': 'second'})
    client.post('/api/scans/s1/report', json={})
    client.post('/api/scans/s2/report', json={})

    reports = client.get('/api/reports').json()

    assert [r['scanId'] for r in reports] == ['s2', 's1']
    assert 'content' not in reports[0]


def test_dashboard_stats(client, seed):
    now = utc_now()
    seed(
        make_status('s1', status='completed', created_at=now - timedelta(days=30)),
        make_status('s2', status='running', created_at=now - timedelta(days=1)),
        make_status('s3', status='queued', created_at=now),
        make_status('s4', status='failed', created_at=now),
        make_finding('s1', 'CRITICAL'),
        make_finding('s1', 'HIGH'),
        make_finding('s2', 'LOW'),
    )

    stats = client.get('/api/dashboard/stats').json()

    assert stats == {
        'totalScans': 4,
        'activeScans': 2,
        'completedScans': 1,
        'failedScans': 1,
        'recentScans': 3,
        'totalFindings': 3,
        'criticalFindings': 1,
        'highFindings': 1
    }


class ReportWriteFailingStore(ScanStore):
    """Store whose report writes are rejected by the database"""

    @store_operation
    async def upsert_report(self, report):
        raise OperationFailure('not primary')


def test_generate_report_store_failure(client, backend, seed, db):
    seed(make_status('s1', status='completed'))
    backend.respond('GET', '/scan/s1/report', json={'reportUrl': 'https://reports.example.com/s1.pdf'})
    app.dependency_overrides[get_scan_store] = lambda: ReportWriteFailingStore(db)

    resp = client.post('/api/scans/s1/report', json={'tags': []})

    assert resp.status_code == 500
    body = resp.json()
    assert body['error'] == 'Status store error'
    assert 'not primary' in body['details']
    assert client.get('/api/scans/s1/report/view', follow_redirects=False).status_code == 404


def test_dashboard_stats_counts_lowercase_severities(client, seed, db):
    seed(make_status('s1', status='completed'), make_finding('s1', 'CRITICAL'))

    async def insert_raw():
        await db.findings.insert_one({'id': 'raw-1', 'scan_id': 's1', 'severity': 'critical'})
        await db.findings.insert_one({'id': 'raw-2', 'scan_id': 's1', 'severity': 'high'})

    asyncio.run(insert_raw())

    stats = client.get('/api/dashboard/stats').json()

    assert stats['totalFindings'] == 3
    assert stats['criticalFindings'] == 2
    assert stats['highFindings'] == 1
