"""Per-request coordination of directory walks and streamed responses.

A report request writes its page header immediately, then walks the
directory in a worker thread. If the walk outlasts the apology timeout, a
"please wait" notice is written while the walk carries on. The table is
written by the background task once the walk is done. All writes to one
response go through the stream's lock, and the background task only takes
the stream after the request path has released it.
"""

import asyncio
import json
import logging
import os
from typing import Any, AsyncIterator, Dict, Optional, Set

from ..core.clock import RealClock
from ..core.encoders import to_flat_arrays, to_nested_tree, to_rows
from ..core.models import Report, report_total
from ..core.scanner import DirectoryScanner
from ..exceptions import EncodingError, TransportWriteError
from ..utils.formatters import format_file_size, normalize_request_path, parent_path
from .renderer import SERVER_ERROR, ReportRenderer

CHARTS = ("d3", "sunburst")


class ReportStream:
    """Chunked output of one streamed response.

    Fragments are queued for the transport, which drains them through
    ``chunks()``. Once the client goes away, writes raise TransportWriteError.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self.lock = asyncio.Lock()
        self.disconnected = False
        self.finished = False

    async def write(self, fragment: str) -> None:
        if self.disconnected:
            raise TransportWriteError("client disconnected")
        if self.finished:
            raise TransportWriteError("response already finished")
        await self._queue.put(fragment.encode("utf-8"))

    async def flush(self) -> None:
        # Queued chunks are sent as soon as the transport gets to run.
        await asyncio.sleep(0)

    def finish(self) -> None:
        if not self.finished:
            self.finished = True
            self._queue.put_nowait(None)

    async def chunks(self) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await self._queue.get()
                if chunk is None:
                    return
                yield chunk
        finally:
            if not self.finished:
                self.disconnected = True


class ReportOrchestrator:
    """Serves report requests against one base directory."""

    def __init__(self, scanner: DirectoryScanner, base_path: str,
                 renderer: Optional[ReportRenderer] = None,
                 apology_timeout: float = 2.0, clock=None,
                 artificial_delay: float = 0.0):
        """Initialize report orchestrator.

        Args:
            scanner: Scanner used for every walk.
            base_path: Directory that logical request paths are resolved against.
            renderer: Page renderer.
            apology_timeout: Seconds to wait before writing the apology notice.
            clock: Time source providing ``async sleep``. Defaults to RealClock.
            artificial_delay: Extra seconds slept after each walk, for testing.
        """
        self.scanner = scanner
        self.base_path = base_path
        self.renderer = renderer or ReportRenderer()
        self.apology_timeout = apology_timeout
        self.clock = clock or RealClock()
        self.artificial_delay = artificial_delay
        self.logger = logging.getLogger(__name__)
        self._tasks: Set[asyncio.Task] = set()

    def resolve(self, path: str) -> str:
        """Filesystem path of a normalized logical path."""
        return os.path.join(self.base_path, path.lstrip("/"))

    def start(self, requested_path: str, chart: Optional[str], stream: ReportStream) -> asyncio.Task:
        """Handle a streamed request in its own task, independent of the transport."""
        task = asyncio.create_task(self.handle(requested_path, chart, stream))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def handle(self, requested_path: str, chart: Optional[str], stream: ReportStream) -> None:
        """Write a complete report page for ``requested_path`` to ``stream``."""
        path = normalize_request_path(requested_path)
        if chart not in CHARTS:
            chart = None

        try:
            try:
                header = self.renderer.header(path, chart)
            except EncodingError as e:
                self.logger.error(f"Internal error: {e}")
                await self._write(stream, SERVER_ERROR)
                return

            async with stream.lock:
                await self._write(stream, header)

            walk_done = asyncio.Event()
            handoff = asyncio.Event()
            body = asyncio.create_task(self._write_body(path, chart, stream, walk_done, handoff))
            try:
                if await self._race(walk_done):
                    self.logger.info(f"Scan of {path} is taking longer than {self.apology_timeout}s")
                    async with stream.lock:
                        await self._write(stream, self.renderer.apology())
            finally:
                handoff.set()
            await body
        except Exception as e:
            self.logger.exception(f"Failed to serve report for {path}: {e}")
            await self._write(stream, SERVER_ERROR)
        finally:
            stream.finish()

    async def _race(self, walk_done: asyncio.Event) -> bool:
        """Wait for the walk or the apology timeout.

        Returns:
            True if the timeout elapsed while the walk was still running.
        """
        waiter = asyncio.ensure_future(walk_done.wait())
        timer = asyncio.ensure_future(self.clock.sleep(self.apology_timeout))
        try:
            await asyncio.wait({waiter, timer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (waiter, timer):
                if not pending.done():
                    pending.cancel()
        return not walk_done.is_set()

    async def _write_body(self, path: str, chart: Optional[str], stream: ReportStream,
                          walk_done: asyncio.Event, handoff: asyncio.Event) -> None:
        try:
            report = await self.walk(path)
        finally:
            walk_done.set()

        try:
            chart_data = self._encode_chart(report, path, chart)
            fragment = self.renderer.table(
                path=path,
                parent=parent_path(path),
                rows=to_rows(report),
                total=format_file_size(report_total(report)),
                chart=chart,
                chart_data=chart_data,
            )
        except EncodingError as e:
            self.logger.error(f"Internal error: {e}")
            fragment = SERVER_ERROR

        await handoff.wait()
        async with stream.lock:
            await self._write(stream, fragment)

    async def walk(self, path: str) -> Report:
        """Walk a normalized logical path in a worker thread."""
        report = await asyncio.to_thread(self.scanner.walk, self.resolve(path), "")
        if self.artificial_delay > 0:
            await self.clock.sleep(self.artificial_delay)
        return report

    def _encode_chart(self, report: Report, path: str, chart: Optional[str]) -> Any:
        if chart == "d3":
            return to_nested_tree(report, path)
        if chart == "sunburst":
            return to_flat_arrays(report)
        return None

    async def build_json(self, requested_path: str, flat: bool = False) -> str:
        """Serialized nested (or flat) encoding of ``requested_path``.

        Raises:
            EncodingError: If the encoding cannot be serialized.
        """
        path = normalize_request_path(requested_path)
        report = await self.walk(path)
        data: Dict[str, Any] = to_flat_arrays(report) if flat else to_nested_tree(report, path)
        try:
            return json.dumps(data, indent=2) + "\n"
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodingError(f"Failed to serialize report for {path}: {e}") from e

    async def _write(self, stream: ReportStream, fragment: str) -> None:
        try:
            await stream.write(fragment)
            await stream.flush()
        except TransportWriteError as e:
            self.logger.warning(f"Dropping response fragment: {e}")

    async def wait_idle(self) -> None:
        """Wait for every request task started so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
