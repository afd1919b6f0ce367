# Report schemas
from pydantic import Field
from typing import Optional, List, Any
from datetime import datetime
import uuid
from schemas.base import CamelModel, utc_now

class ReportRequest(CamelModel):
    tags: List[str] = Field(default_factory=list)

class ReportRecord(CamelModel):
    report_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scan_id: str
    company_name: Optional[str] = None
    domain: Optional[str] = None
    report_url: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)

class GeneratedReport(CamelModel):
    report_id: str
    report_url: Optional[str] = None
    report: Optional[str] = None
    summary: Optional[Any] = None
    generated_at: datetime

class ReportSummary(CamelModel):
    report_id: str
    scan_id: str
    company_name: Optional[str] = None
    domain: Optional[str] = None
    report_url: Optional[str] = None
    summary: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)
    generated_at: datetime
