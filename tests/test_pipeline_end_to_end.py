import asyncio
import logging

import pytest

from wapwatch.core.config import Settings
from wapwatch.pipeline.runner import leaf_exceptions, run_pipeline
from wapwatch.services.wap import get_wap

from conftest import WPA2_LINE, OPEN_LINE

pytestmark = pytest.mark.asyncio


def _config(**overrides):
    values = dict(
        SCAN_EVERY=3600,
        FLUSH_EVERY=0.05,
        CONNECT_ENABLED=False,
        RAW_BUFFER=8,
        PARSED_BUFFER=8,
        COMMITTED_BUFFER=8,
    )
    values.update(overrides)
    return Settings(**values)


class RepeatingNmcli:
    def __init__(self, payload: bytes):
        self.payload = payload
        self.calls = 0

    async def __call__(self) -> bytes:
        self.calls += 1
        return self.payload


async def _wait_for_row(session_factory, bssid, timeout=5.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        async with session_factory() as db:
            wap = await get_wap(db, bssid)
        if wap is not None:
            return wap
        await asyncio.sleep(0.02)
    raise AssertionError(f"{bssid} never reached the database")


async def _stop(task):
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


async def test_scan_reaches_database_and_is_logged(session_factory, caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    scan = RepeatingNmcli(f"{WPA2_LINE}\n{OPEN_LINE}\nnot:an:ap\n".encode())
    task = asyncio.create_task(run_pipeline(session_factory, _config(), scan_runner=scan))

    wap = await _wait_for_row(session_factory, "AA:BB:CC:DD:EE:FF")
    assert wap.ssid == "MyWifi"
    assert wap.security == "WPA2"
    await _wait_for_row(session_factory, "11:22:33:44:55:66")
    for _ in range(50):
        if "Public WAP spotted" in caplog.text and "Protected WAP spotted" in caplog.text:
            break
        await asyncio.sleep(0.02)
    await _stop(task)

    assert "Protected WAP spotted" in caplog.text
    assert "Public WAP spotted" in caplog.text


async def test_restart_with_same_scan_logs_nothing_new(session_factory, caplog):
    scan = RepeatingNmcli(f"{WPA2_LINE}\n".encode())
    task = asyncio.create_task(run_pipeline(session_factory, _config(), scan_runner=scan))
    await _wait_for_row(session_factory, "AA:BB:CC:DD:EE:FF")
    await asyncio.sleep(0.1)
    await _stop(task)

    caplog.clear()
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    task = asyncio.create_task(run_pipeline(session_factory, _config(), scan_runner=scan))
    await asyncio.sleep(0.3)
    await _stop(task)

    assert scan.calls == 2
    assert "WAP spotted" not in caplog.text


async def test_stage_failure_stops_the_pipeline(session_factory):
    async def broken_scan() -> bytes:
        raise RuntimeError("boom")

    with pytest.raises(ExceptionGroup) as exc_info:
        await asyncio.wait_for(run_pipeline(session_factory, _config(), scan_runner=broken_scan), timeout=5)
    assert [type(e) for e in leaf_exceptions(exc_info.value)] == [RuntimeError]
