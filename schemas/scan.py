# Scan schemas
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum
from schemas.base import CamelModel, utc_now
from schemas.finding import FindingRecord, Severity

class ScanState(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'

TERMINAL_STATES = frozenset({ScanState.COMPLETED.value, ScanState.FAILED.value})
ACTIVE_STATES = frozenset({ScanState.QUEUED.value, ScanState.RUNNING.value, ScanState.PROCESSING.value})

# Work units run by the scanning backend for every scan
SECURITY_MODULES = (
    'spiderfoot',
    'dns_twist',
    'document_exposure',
    'shodan',
    'db_port_scan',
    'endpoint_discovery',
    'tls_scan',
    'nuclei',
    'rate_limit_scan',
    'spf_dmarc',
    'trufflehog'
)

def is_terminal(status: Optional[str]) -> bool:
    return status in TERMINAL_STATES

class ScanStatusRecord(CamelModel):
    scan_id: str
    company_name: Optional[str] = None
    domain: Optional[str] = None
    status: ScanState = ScanState.QUEUED
    progress: int = 0  # 0-100
    current_module: Optional[str] = None
    total_modules: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    last_updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

class ScanCreate(CamelModel):
    company_name: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)

class ScanCreated(CamelModel):
    scan_id: str
    status_stored: bool = True

class ScanSummary(CamelModel):
    scan_id: str
    company_name: Optional[str] = None
    domain: Optional[str] = None
    status: ScanState
    progress: int = 0
    current_module: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    total_findings: int = 0
    max_severity: Severity = Severity.INFO

class ModuleStatus(CamelModel):
    name: str
    status: str  # pending, completed, failed
    findings: int = 0
    error: Optional[str] = None

class ScanDetails(ScanStatusRecord):
    findings: List[FindingRecord] = Field(default_factory=list)
    modules: List[ModuleStatus] = Field(default_factory=list)
    total_findings: int = 0
    max_severity: Severity = Severity.INFO

class BackendStatus(BaseModel):
    """Live status as reported by the scanning backend, already mapped to local states."""
    status: ScanState
    raw_status: Optional[str] = None
    progress: Optional[int] = None
    current_module: Optional[str] = None
    total_modules: Optional[int] = None
    error: Optional[str] = None
