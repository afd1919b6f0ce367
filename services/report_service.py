# Report service - generation at the scanning backend, storage and lookup
import html
import logging
from typing import List, Optional
from schemas.report import ReportRecord, GeneratedReport, ReportSummary
from services.errors import NotFound, InvalidResponse
from services.scan_store import ScanStore
from services.scanner_client import ScannerClient

logger = logging.getLogger(__name__)

REPORT_PAGE_TEMPLATE = '''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: system-ui, sans-serif; max-width: 960px; margin: 2rem auto; padding: 0 1rem; color: #1f2937; }}
header {{ border-bottom: 1px solid #e5e7eb; margin-bottom: 1.5rem; }}
pre {{ white-space: pre-wrap; word-wrap: break-word; font-family: inherit; line-height: 1.5; }}
</style>
</head>
<body>
<header>
<h1>{title}</h1>
<p>Generated {generated_at}</p>
</header>
<pre>{content}</pre>
</body>
</html>
'''


def render_report_page(report: ReportRecord) -> str:
    """HTML document embedding stored report content"""
    subject = report.company_name or report.domain or report.scan_id
    return REPORT_PAGE_TEMPLATE.format(
        title=html.escape(f'Security report: {subject}'),
        generated_at=html.escape(report.generated_at.isoformat()),
        content=html.escape(report.content or '')
    )


class ReportService:
    def __init__(self, store: ScanStore, scanner: ScannerClient):
        self.store = store
        self.scanner = scanner

    async def generate_report(self, scan_id: str, tags: Optional[List[str]] = None) -> GeneratedReport:
        scan = await self.store.get_status(scan_id)
        if scan is None:
            raise NotFound(details=f'No scan found with ID: {scan_id}')

        payload = await self.scanner.get_report(scan_id, tags)
        report_url = payload.get('reportUrl') or payload.get('report_url')
        content = payload.get('report') or payload.get('content')
        if not report_url and not content:
            raise InvalidResponse(details='Report response has neither a URL nor content')

        report = ReportRecord(
            scan_id=scan_id,
            company_name=scan.company_name,
            domain=scan.domain,
            report_url=report_url,
            content=content,
            summary=payload.get('summary'),
            tags=list(tags or [])
        )
        await self.store.upsert_report(report)
        logger.info(f'Stored report {report.report_id} for scan {scan_id}')

        return GeneratedReport(
            report_id=report.report_id,
            report_url=report.report_url,
            report=report.content,
            summary=report.summary,
            generated_at=report.generated_at
        )

    async def get_report_for_view(self, scan_id: str) -> ReportRecord:
        report = await self.store.get_latest_report(scan_id)
        if report is None or not (report.report_url or report.content):
            raise NotFound('Report not found', details=f'No report available for scan {scan_id}')
        return report

    async def list_reports(self, limit: int = 100) -> List[ReportSummary]:
        reports = await self.store.list_reports(limit)
        return [
            ReportSummary(**report.model_dump(exclude={'content'}))
            for report in reports
        ]
