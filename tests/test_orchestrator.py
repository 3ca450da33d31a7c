"""
Tests for request orchestration: header, apology notice and report body.
"""
import logging
import os
import threading

import pytest

from du_browser.core.cache import PathCache
from du_browser.core.clock import FakeClock
from du_browser.core.scanner import DirectoryScanner
from du_browser.exceptions import EncodingError, TransportWriteError
from du_browser.server.orchestrator import ReportOrchestrator, ReportStream
from du_browser.server.renderer import APOLOGY, SERVER_ERROR, ReportRenderer

pytestmark = pytest.mark.asyncio


class GatedScanner:
    """Scanner whose walks block until the test opens the gate."""

    def __init__(self, scanner):
        self.scanner = scanner
        self.gate = threading.Event()

    def walk(self, base_path, sub_path=""):
        self.gate.wait(5)
        return self.scanner.walk(base_path, sub_path)


class BrokenTableRenderer(ReportRenderer):
    def table(self, *args, **kwargs):
        raise EncodingError("template exploded")


async def collect(stream):
    return [chunk.decode("utf-8") async for chunk in stream.chunks()]


async def test_fast_walk_writes_header_then_body(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("", None, stream)
    chunks = await collect(stream)

    assert len(chunks) == 2
    header, body = chunks
    assert "<h1>/</h1>" in header
    assert APOLOGY not in "".join(chunks)
    assert "Total: 9 B" in body
    assert body.index("44.4%") < body.index("33.3%") < body.index("22.2%") < body.index("0.0%")


async def test_slow_walk_writes_apology_before_body(base_path):
    clock = FakeClock()
    scanner = GatedScanner(DirectoryScanner())
    orchestrator = ReportOrchestrator(scanner, str(base_path), apology_timeout=2, clock=clock)
    stream = ReportStream()

    task = orchestrator.start("/", None, stream)
    chunks = stream.chunks()

    header = (await chunks.__anext__()).decode()
    assert "<h1>/</h1>" in header

    await clock.wait_for_sleepers(1)
    clock.advance(2)
    assert (await chunks.__anext__()).decode() == APOLOGY

    scanner.gate.set()
    body = (await chunks.__anext__()).decode()
    assert "Total: 9 B" in body

    await task
    assert [chunk async for chunk in chunks] == []
    assert stream.finished


async def test_artificial_delay_triggers_apology(base_path):
    clock = FakeClock()
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=2,
                                      clock=clock, artificial_delay=5)
    stream = ReportStream()
    task = orchestrator.start("/", None, stream)
    chunks = stream.chunks()
    await chunks.__anext__()

    # The apology timer and the post-walk delay are both pending
    await clock.wait_for_sleepers(2)
    clock.advance(2)
    assert (await chunks.__anext__()).decode() == APOLOGY

    clock.advance(3)
    assert "Total: 9 B" in (await chunks.__anext__()).decode()
    await task


async def test_disconnected_client_does_not_stop_walk(base_path, caplog):
    cache = PathCache(ttl_seconds=30, clock=FakeClock())
    scanner = GatedScanner(DirectoryScanner(cache=cache))
    orchestrator = ReportOrchestrator(scanner, str(base_path), apology_timeout=60)
    stream = ReportStream()

    task = orchestrator.start("/", None, stream)
    chunks = stream.chunks()
    await chunks.__anext__()
    await chunks.aclose()
    assert stream.disconnected

    with caplog.at_level(logging.WARNING):
        scanner.gate.set()
        await task

    assert "Dropping response fragment" in caplog.text
    assert cache.get(os.path.abspath(str(base_path))) is not None


async def test_encoding_failure_writes_server_error(base_path, caplog):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path),
                                      renderer=BrokenTableRenderer(), apology_timeout=60)
    stream = ReportStream()

    with caplog.at_level(logging.ERROR):
        await orchestrator.handle("/", None, stream)

    chunks = await collect(stream)
    assert chunks[-1] == SERVER_ERROR
    assert "template exploded" in caplog.text


async def test_d3_chart_embeds_nested_tree(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("/", "d3", stream)
    header, body = await collect(stream)

    assert "/static/icicle.js" in header
    assert '{"name": "d", "value": 4}' in body


async def test_sunburst_chart_embeds_flat_arrays(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("/", "sunburst", stream)
    header, body = await collect(stream)

    assert "/static/sunburst.js" in header
    assert '"ids": ["a", "b", "c", "c/d", "emptyDir"]' in body


async def test_unknown_chart_is_ignored(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("/", "pie", stream)
    header, body = await collect(stream)

    assert "<script" not in header
    assert 'id="chart"' not in body


async def test_subdirectory_request(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("/c", None, stream)
    header, body = await collect(stream)

    assert "<h1>/c</h1>" in header
    assert "Total: 4 B" in body
    assert "100.0%" in body


async def test_path_cannot_escape_base(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path / "c"), apology_timeout=60)
    stream = ReportStream()

    await orchestrator.handle("/../..", None, stream)
    header, body = await collect(stream)

    assert "<h1>/</h1>" in header
    assert "Total: 4 B" in body


async def test_build_json(base_path):
    orchestrator = ReportOrchestrator(DirectoryScanner(), str(base_path))

    nested = await orchestrator.build_json("/c")
    flat = await orchestrator.build_json("/", flat=True)

    assert '"name": "/c"' in nested
    assert '"value": 4' in nested
    assert '"c/d"' in flat


async def test_write_after_finish_is_rejected():
    stream = ReportStream()
    stream.finish()

    with pytest.raises(TransportWriteError):
        await stream.write("late")
