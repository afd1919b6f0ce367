import asyncio

import pytest

from conftest import make_artifact, make_finding, make_status
from schemas.scan import SECURITY_MODULES
from services.errors import NotFound
from services.scan_aggregator import ScanAggregator, max_severity, module_statuses, sort_findings


def test_max_severity_of_no_findings_is_info():
    assert max_severity([]) == 'INFO'


@pytest.mark.parametrize('severities, expected', [
    (['LOW'], 'LOW'),
    (['MEDIUM', 'CRITICAL', 'LOW'], 'CRITICAL'),
    (['HIGH', 'HIGH'], 'HIGH'),
    (['INFO', 'medium'], 'MEDIUM'),
])
def test_max_severity(severities, expected):
    findings = [make_finding('s1', severity) for severity in severities]
    assert max_severity(findings) == expected


def test_findings_sorted_by_severity_then_newest():
    findings = [
        make_finding('s1', 'LOW', minutes=5, id='low-new'),
        make_finding('s1', 'CRITICAL', minutes=1, id='critical-old'),
        make_finding('s1', 'LOW', minutes=1, id='low-old'),
        make_finding('s1', 'CRITICAL', minutes=9, id='critical-new'),
        make_finding('s1', 'MEDIUM', minutes=3, id='medium'),
    ]

    ordered = [f.id for f in sort_findings(findings)]

    assert ordered == ['critical-new', 'critical-old', 'medium', 'low-new', 'low-old']


def test_module_statuses_precedence():
    artifacts = [
        make_artifact('s1', 'tls_scan'),
        make_artifact('s1', 'tls_scan'),
        make_artifact('s1', 'nuclei'),
        make_artifact('s1', 'nuclei', type='scan_error', val_text='nuclei timed out'),
        make_artifact('s1', 'shodan', meta={'error': 'API quota exceeded'}),
        make_artifact('s1', 'custom_probe'),
    ]

    modules = {m.name: m for m in module_statuses(artifacts)}

    assert modules['tls_scan'].status == 'completed'
    assert modules['tls_scan'].findings == 2
    assert modules['nuclei'].status == 'failed'
    assert modules['nuclei'].error == 'nuclei timed out'
    assert modules['shodan'].status == 'failed'
    assert modules['shodan'].error == 'API quota exceeded'
    assert modules['spiderfoot'].status == 'pending'
    assert modules['custom_probe'].status == 'completed'
    assert list(modules)[:len(SECURITY_MODULES)] == list(SECURITY_MODULES)


def test_list_scans_joins_findings(store, seed):
    seed(
        make_status('s1', status='completed', minutes=1),
        make_status('s2', status='running', minutes=2),
        make_finding('s1', 'MEDIUM'),
        make_finding('s1', 'CRITICAL'),
    )

    summaries = asyncio.run(ScanAggregator(store).list_scans())

    assert [s.scan_id for s in summaries] == ['s2', 's1']
    s1 = summaries[1]
    assert (s1.total_findings, s1.max_severity) == (2, 'CRITICAL')
    s2 = summaries[0]
    assert (s2.total_findings, s2.max_severity) == (0, 'INFO')


def test_list_scans_caps_after_sorting(store, seed):
    seed(*[make_status(f's{i}', minutes=i) for i in range(5)])

    summaries = asyncio.run(ScanAggregator(store, list_limit=3).list_scans())

    assert [s.scan_id for s in summaries] == ['s4', 's3', 's2']


def test_scan_detail(store, seed):
    seed(
        make_status('s1', status='running', progress=50),
        make_finding('s1', 'LOW', minutes=2),
        make_finding('s1', 'HIGH', minutes=1),
        make_finding('s2', 'CRITICAL'),
        make_artifact('s1', 'dns_twist'),
    )

    details = asyncio.run(ScanAggregator(store).get_scan_detail('s1'))

    assert details.scan_id == 's1'
    assert details.progress == 50
    assert [f.severity for f in details.findings] == ['HIGH', 'LOW']
    assert details.total_findings == 2
    assert details.max_severity == 'HIGH'
    modules = {m.name: m.status for m in details.modules}
    assert modules['dns_twist'] == 'completed'
    assert modules['nuclei'] == 'pending'


def test_scan_detail_unknown_scan(store):
    with pytest.raises(NotFound):
        asyncio.run(ScanAggregator(store).get_scan_detail('missing'))
