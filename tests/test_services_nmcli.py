import asyncio

import pytest

from wapwatch.exceptions import NmcliError
from wapwatch.services import nmcli

pytestmark = pytest.mark.asyncio


async def test_stdout_is_returned():
    out = await nmcli.run_nmcli("dev", "wifi", "list", binary="echo")
    assert out == b"dev wifi list\n"


async def test_missing_binary_raises():
    with pytest.raises(NmcliError) as exc_info:
        await nmcli.run_nmcli("dev", "wifi", "list", binary="/nonexistent/nmcli")
    assert exc_info.value.returncode is None
    assert exc_info.value.reason == "could not start process"


async def test_nonzero_exit_raises():
    with pytest.raises(NmcliError) as exc_info:
        await nmcli.run_nmcli("dev", "wifi", "list", binary="false")
    assert exc_info.value.returncode == 1
    assert exc_info.value.command == ("false", "dev", "wifi", "list")


async def test_connect_command_line(monkeypatch):
    calls = []

    async def fake_run(*args, binary=None):
        calls.append(args)
        return b""

    monkeypatch.setattr(nmcli, "run_nmcli", fake_run)
    await nmcli.connect_wifi("CoffeeShop")
    await nmcli.scan_wifi()
    assert calls[0] == ("dev", "wifi", "connect", "CoffeeShop", "ifname", "wlan0")
    assert calls[1] == nmcli.SCAN_ARGS


def test_exit_code_reason():
    err = NmcliError(("nmcli", "dev", "wifi", "list"), 8, "Error: NetworkManager is not running.\n")
    assert err.reason == "NetworkManager is not running"
    assert "exited with 8" in str(err)


async def test_cancel_kills_running_process():
    task = asyncio.create_task(nmcli.run_nmcli("10", binary="sleep"))
    await asyncio.sleep(0.1)
    task.cancel()
    loop = asyncio.get_running_loop()
    started = loop.time()
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=5)
    assert loop.time() - started < 2
