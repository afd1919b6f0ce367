# Scan aggregation - list and detail views joined with findings and artifacts
import logging
from collections import defaultdict
from typing import Iterable, List, Dict, Optional
from schemas.finding import FindingRecord, ArtifactRecord, Severity, severity_rank
from schemas.scan import ScanStatusRecord, ScanSummary, ScanDetails, ModuleStatus, SECURITY_MODULES
from services.errors import NotFound
from services.scan_store import ScanStore

logger = logging.getLogger(__name__)


def max_severity(findings: Iterable[FindingRecord]) -> str:
    """Highest severity on the INFO < LOW < MEDIUM < HIGH < CRITICAL scale, INFO when empty"""
    highest = Severity.INFO.value
    for finding in findings:
        if severity_rank(finding.severity) > severity_rank(highest):
            highest = Severity(finding.severity).value
    return highest


def sort_findings(findings: List[FindingRecord]) -> List[FindingRecord]:
    """CRITICAL first; newest first among equal severities"""
    by_date = sorted(findings, key=lambda f: f.created_at, reverse=True)
    return sorted(by_date, key=lambda f: severity_rank(f.severity), reverse=True)


def group_by_scan(findings: Iterable[FindingRecord]) -> Dict[str, List[FindingRecord]]:
    groups = defaultdict(list)
    for finding in findings:
        groups[finding.scan_id].append(finding)
    return groups


def build_summary(record: ScanStatusRecord, findings: List[FindingRecord]) -> ScanSummary:
    return ScanSummary(
        scan_id=record.scan_id,
        company_name=record.company_name,
        domain=record.domain,
        status=record.status,
        progress=record.progress,
        current_module=record.current_module,
        created_at=record.created_at,
        completed_at=record.completed_at,
        total_findings=len(findings),
        max_severity=max_severity(findings)
    )


def module_statuses(artifacts: Iterable[ArtifactRecord], modules: Iterable[str] = SECURITY_MODULES) -> List[ModuleStatus]:
    """
    Per-module status from the scan's artifacts: no artifacts is pending,
    any error artifact is failed, otherwise completed.
    """
    by_module = defaultdict(list)
    for artifact in artifacts:
        by_module[artifact.module].append(artifact)

    names = list(modules)
    names.extend(sorted(name for name in by_module if name not in names))

    result = []
    for name in names:
        module_artifacts = by_module.get(name, [])
        errors = [a for a in module_artifacts if a.is_error]
        if not module_artifacts:
            status = 'pending'
        elif errors:
            status = 'failed'
        else:
            status = 'completed'
        result.append(ModuleStatus(
            name=name,
            status=status,
            findings=len(module_artifacts) - len(errors),
            error=errors[0].error_text if errors else None
        ))
    return result


class ScanAggregator:
    """Builds the presentation views for the scan list and scan detail pages"""

    def __init__(self, store: ScanStore, list_limit: Optional[int] = None):
        self.store = store
        self.list_limit = list_limit

    async def list_scans(self) -> List[ScanSummary]:
        # Store returns newest first, so the cap keeps the most recent scans
        records = await self.store.list_statuses(self.list_limit)
        findings = group_by_scan(await self.store.list_findings(scan_ids=[r.scan_id for r in records]))

        summaries = [build_summary(record, findings.get(record.scan_id, [])) for record in records]
        summaries.sort(key=lambda s: s.created_at, reverse=True)

        logger.info(f'Built {len(summaries)} scan summaries from {len(records)} status records')
        return summaries

    async def get_scan_detail(self, scan_id: str) -> ScanDetails:
        record = await self.store.get_status(scan_id)
        if record is None:
            raise NotFound(details=f'No scan found with ID: {scan_id}')

        findings = sort_findings(await self.store.list_findings(scan_id))
        artifacts = await self.store.list_artifacts(scan_id)

        return ScanDetails(
            **record.model_dump(),
            findings=findings,
            modules=module_statuses(artifacts),
            total_findings=len(findings),
            max_severity=max_severity(findings)
        )
