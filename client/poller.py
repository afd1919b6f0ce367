"""
Status polling for scans that are still in progress.

A poller asks for a scan's status immediately and then every `interval`
seconds, hands every response to `on_update`, and stops on its own once a
terminal status has been delivered. Failed polls are logged and retried on
the next tick. Everything runs as tasks on the current asyncio event loop.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional
from schemas.scan import ScanStatusRecord, ACTIVE_STATES, is_terminal

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0

FetchStatus = Callable[[str], Awaitable[ScanStatusRecord]]
OnUpdate = Callable[[ScanStatusRecord], Any]


class StatusPoller:
    def __init__(self, fetch_status: FetchStatus, scan_id: str, on_update: OnUpdate,
                 interval: float = DEFAULT_INTERVAL_SECONDS):
        self.fetch_status = fetch_status
        self.scan_id = scan_id
        self.on_update = on_update
        self.interval = interval
        self.finished = False
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> Callable[[], None]:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self.cancel

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug(f'Stopped polling scan {self.scan_id}')

    async def wait(self) -> None:
        """Wait until the poller stops, either on a terminal status or on cancel"""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise

    async def _run(self) -> None:
        while not self._cancelled:
            try:
                record = await self.fetch_status(self.scan_id)
            except Exception as e:
                logger.warning(f'Failed to poll scan status for {self.scan_id}: {e}')
            else:
                if self._cancelled:
                    # Late response after cancel
                    return
                await self._deliver(record)
                if is_terminal(record.status):
                    self.finished = True
                    logger.info(f'Scan {self.scan_id} reached {record.status}; polling stopped')
                    return
            await asyncio.sleep(self.interval)

    async def _deliver(self, record: ScanStatusRecord) -> None:
        try:
            result = self.on_update(record)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(f'Status update handler failed for scan {self.scan_id}')


def start_polling(fetch_status: FetchStatus, scan_id: str, on_update: OnUpdate,
                  interval: float = DEFAULT_INTERVAL_SECONDS) -> Callable[[], None]:
    """Poll a scan's status until it is terminal; returns a function that stops polling"""
    return StatusPoller(fetch_status, scan_id, on_update, interval).start()


class PollerGroup:
    """One poller per active scan, kept in step with the scan list being displayed"""

    def __init__(self, fetch_status: FetchStatus, on_update: OnUpdate,
                 interval: float = DEFAULT_INTERVAL_SECONDS):
        self.fetch_status = fetch_status
        self.on_update = on_update
        self.interval = interval
        self._pollers: Dict[str, StatusPoller] = {}

    @property
    def active(self) -> set:
        return {scan_id for scan_id, poller in self._pollers.items() if poller.running}

    def sync(self, scans: Iterable[Any]) -> None:
        """
        Start pollers for listed in-progress scans and stop the rest.

        A poller that already delivered a terminal status stays registered
        while the list still shows its scan as active, so a stale list does
        not start polling that scan again.
        """
        wanted = {scan.scan_id for scan in scans if scan.status in ACTIVE_STATES}

        for scan_id in list(self._pollers):
            if scan_id not in wanted:
                self._pollers.pop(scan_id).cancel()

        for scan_id in wanted:
            if scan_id not in self._pollers:
                poller = StatusPoller(self.fetch_status, scan_id, self.on_update, self.interval)
                poller.start()
                self._pollers[scan_id] = poller

    def stop(self, scan_id: str) -> None:
        poller = self._pollers.pop(scan_id, None)
        if poller is not None:
            poller.cancel()

    def close(self) -> None:
        for poller in self._pollers.values():
            poller.cancel()
        self._pollers.clear()
