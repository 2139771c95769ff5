import asyncio
import logging
from datetime import datetime

import pytest

from wapwatch.pipeline.channel import Channel
from wapwatch.pipeline.classifier import classify, classify_worker, log_change
from wapwatch.schemas.wap import ChangeEvent, PersistedAccessPoint
from wapwatch.services.parser import parse_line

from conftest import WPA2_LINE, OPEN_LINE

pytestmark = pytest.mark.asyncio

NOW = datetime(2026, 1, 1, 12, 0)


def _event(line, upserted=True, **update):
    obs = parse_line(line).model_copy(update=update)
    row = PersistedAccessPoint(**obs.model_dump(), id=1, created_at=NOW, updated_at=NOW)
    return ChangeEvent(row=row, upserted=upserted)


@pytest.mark.parametrize("security,expected", [
    ("Open", "Open"),
    ("WPA", "Protected"),
    ("WPA2", "Protected"),
    ("WPA3", "Protected"),
    ("WEP", "Protected"),
    ("WPA2 WPA3", "Unknown"),
    ("802.1X", "Unknown"),
    ("", "Unknown"),
])
def test_classify(security, expected):
    assert classify(security) == expected


def test_protected_change_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    assert log_change(_event(WPA2_LINE)) == "Protected"
    assert "Protected WAP spotted" in caplog.text
    assert "MyWifi" in caplog.text
    assert "AA:BB:CC:DD:EE:FF" in caplog.text
    assert "Infra" in caplog.text


def test_open_change_is_logged_as_public(caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    assert log_change(_event(OPEN_LINE)) == "Open"
    assert "Public WAP spotted" in caplog.text


def test_unknown_security_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    assert log_change(_event(WPA2_LINE, security="WPA1 WPA2")) == "Unknown"
    assert "Unknown WAP spotted" in caplog.text


def test_unchanged_event_is_silent(caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    assert log_change(_event(WPA2_LINE, upserted=False)) is None
    assert caplog.records == []


async def test_worker_pool_logs_each_change_once(caplog):
    caplog.set_level(logging.INFO, logger="wapwatch.pipeline.classifier")
    ch = Channel(16)
    for i in range(6):
        await ch.send(_event(OPEN_LINE, upserted=i % 2 == 0, bssid=f"00:00:00:00:00:{i:02X}"))
    ch.close()
    workers = [asyncio.create_task(classify_worker(ch, i)) for i in range(2)]
    await asyncio.wait_for(asyncio.gather(*workers), timeout=1)
    spotted = [r for r in caplog.records if "Public WAP spotted" in r.getMessage()]
    assert len(spotted) == 3
