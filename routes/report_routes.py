# Report routes
from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from typing import List
import logging
from config.settings import Settings, get_settings
from schemas.report import ReportRequest, GeneratedReport, ReportSummary
from services.report_service import ReportService, render_report_page
from routes.dependencies import get_report_service

router = APIRouter(tags=['Reports'])
logger = logging.getLogger(__name__)

@router.post('/scans/{scan_id}/report', response_model=GeneratedReport)
async def generate_report(
    scan_id: str,
    report_request: ReportRequest,
    report_service: ReportService = Depends(get_report_service)
):
    """Generate a report at the scanning backend and store it for the scan"""
    report = await report_service.generate_report(scan_id, report_request.tags)
    logger.info(f'Generated report {report.report_id} for scan {scan_id}')
    return report

@router.get('/scans/{scan_id}/report/view', response_class=HTMLResponse)
async def view_report(
    scan_id: str,
    report_service: ReportService = Depends(get_report_service)
):
    """Redirect to the hosted report, or render the stored report content"""
    report = await report_service.get_report_for_view(scan_id)
    if report.report_url:
        logger.info(f'Redirecting to report for scan {scan_id}')
        return RedirectResponse(report.report_url, status_code=status.HTTP_302_FOUND)
    return HTMLResponse(render_report_page(report))

@router.get('/reports', response_model=List[ReportSummary])
async def list_reports(
    report_service: ReportService = Depends(get_report_service),
    settings: Settings = Depends(get_settings)
):
    """Stored reports, newest first"""
    reports = await report_service.list_reports(settings.reports_list_limit)
    logger.info(f'Listed {len(reports)} reports')
    return reports
