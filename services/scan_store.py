# Persistence for scan status, findings, artifacts and reports
import logging
from datetime import datetime
from functools import wraps
from typing import Optional, List, Iterable
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from schemas.base import format_timestamp
from schemas.scan import ScanStatusRecord
from schemas.finding import FindingRecord, ArtifactRecord
from schemas.report import ReportRecord
from services.errors import StoreError

logger = logging.getLogger(__name__)

# Upper bound for "fetch everything" queries
MAX_DOCUMENTS = 10000

def store_operation(func):
    """Wrap driver failures in StoreError so routes can answer with a JSON body."""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f'Store operation {func.__name__} failed: {e}')
            raise StoreError(details=str(e)) from e
    return wrapper

class ScanStore:
    """Thin repository over the dashboard's MongoDB collections."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @store_operation
    async def get_status(self, scan_id: str) -> Optional[ScanStatusRecord]:
        doc = await self.db.scan_status.find_one({'scan_id': scan_id}, {'_id': 0})
        if not doc:
            return None
        return ScanStatusRecord(**doc)

    @store_operation
    async def upsert_status(self, record: ScanStatusRecord) -> None:
        await self.db.scan_status.update_one(
            {'scan_id': record.scan_id},
            {'$set': record.to_document()},
            upsert=True
        )

    @store_operation
    async def list_statuses(self, limit: Optional[int] = None) -> List[ScanStatusRecord]:
        cursor = self.db.scan_status.find({}, {'_id': 0}).sort('created_at', -1)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(limit or MAX_DOCUMENTS)
        return [ScanStatusRecord(**doc) for doc in docs]

    @store_operation
    async def list_findings(
        self,
        scan_id: Optional[str] = None,
        scan_ids: Optional[Iterable[str]] = None
    ) -> List[FindingRecord]:
        query = {}
        if scan_id:
            query['scan_id'] = scan_id
        elif scan_ids is not None:
            query['scan_id'] = {'$in': list(scan_ids)}
        docs = await self.db.findings.find(query, {'_id': 0}).sort('created_at', -1).to_list(MAX_DOCUMENTS)
        return [FindingRecord(**doc) for doc in docs]

    @store_operation
    async def count_statuses(
        self,
        statuses: Optional[Iterable[str]] = None,
        created_since: Optional[datetime] = None
    ) -> int:
        query = {}
        if statuses is not None:
            query['status'] = {'$in': list(statuses)}
        if created_since is not None:
            query['created_at'] = {'$gte': format_timestamp(created_since)}
        return await self.db.scan_status.count_documents(query)

    @store_operation
    async def count_findings(self, severity: Optional[str] = None) -> int:
        query = {}
        if severity is not None:
            query['severity'] = {'$in': [severity.upper(), severity.lower(), severity.capitalize()]}
        return await self.db.findings.count_documents(query)

    @store_operation
    async def list_artifacts(self, scan_id: str) -> List[ArtifactRecord]:
        docs = await self.db.artifacts.find({'scan_id': scan_id}, {'_id': 0}).to_list(MAX_DOCUMENTS)
        return [ArtifactRecord(**doc) for doc in docs]

    @store_operation
    async def get_latest_report(self, scan_id: str) -> Optional[ReportRecord]:
        docs = await self.db.reports.find(
            {'scan_id': scan_id},
            {'_id': 0}
        ).sort('generated_at', -1).limit(1).to_list(1)
        if not docs:
            return None
        return ReportRecord(**docs[0])

    @store_operation
    async def upsert_report(self, report: ReportRecord) -> None:
        await self.db.reports.update_one(
            {'scan_id': report.scan_id},
            {'$set': report.to_document()},
            upsert=True
        )

    @store_operation
    async def list_reports(self, limit: int) -> List[ReportRecord]:
        docs = await self.db.reports.find(
            {},
            {'_id': 0, 'content': 0}
        ).sort('generated_at', -1).limit(limit).to_list(limit)
        return [ReportRecord(**doc) for doc in docs]
