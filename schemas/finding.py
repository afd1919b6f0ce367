# Finding and artifact schemas
from pydantic import Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum
import uuid
from schemas.base import CamelModel, utc_now

class Severity(str, Enum):
    INFO = 'INFO'
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'
    CRITICAL = 'CRITICAL'

SEVERITY_ORDER = {
    Severity.INFO.value: 0,
    Severity.LOW.value: 1,
    Severity.MEDIUM.value: 2,
    Severity.HIGH.value: 3,
    Severity.CRITICAL.value: 4
}

def severity_rank(severity: Optional[str]) -> int:
    """Ordinal of a severity string; unknown values rank as INFO."""
    if not severity:
        return 0
    return SEVERITY_ORDER.get(str(severity).upper(), 0)

def normalize_severity(value):
    if value is None or isinstance(value, Severity):
        return value
    value = str(value).upper()
    return value if value in SEVERITY_ORDER else Severity.INFO.value

class FindingRecord(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scan_id: str
    type: str
    severity: Severity = Severity.INFO
    description: str = ''
    recommendation: Optional[str] = None
    artifact_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('severity', mode='before')
    @classmethod
    def check_severity(cls, value):
        return normalize_severity(value)

class ArtifactRecord(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scan_id: str
    module: str  # work unit that produced the artifact, e.g. tls_scan
    type: str
    val_text: Optional[str] = None
    severity: Optional[Severity] = None
    src_url: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('severity', mode='before')
    @classmethod
    def check_severity(cls, value):
        return normalize_severity(value)

    @property
    def is_error(self) -> bool:
        return self.type == 'scan_error' or bool(self.meta.get('error'))

    @property
    def error_text(self) -> Optional[str]:
        if not self.is_error:
            return None
        error = self.meta.get('error')
        if isinstance(error, str):
            return error
        return self.val_text
