import asyncio
import logging

from wapwatch.core.config import settings
from wapwatch.exceptions import NmcliError

logger = logging.getLogger(__name__)

SCAN_ARGS = ("-t", "-c", "no", "-f", "ALL", "dev", "wifi", "list", "--rescan", "yes")


async def run_nmcli(*args: str, binary: str | None = None) -> bytes:
    """
    Запускает nmcli и возвращает stdout.
    Ненулевой код возврата или отсутствие бинарника -> NmcliError.
    При отмене задачи процесс убивается и дожидается завершения.
    """
    cmd = (binary or settings.NMCLI_BIN, *args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise NmcliError(cmd, None, str(e)) from e

    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise

    if proc.returncode != 0:
        raise NmcliError(cmd, proc.returncode, stderr.decode("utf-8", errors="replace"))
    logger.debug(f"{' '.join(cmd)}: {len(stdout)} bytes of output")
    return stdout


async def scan_wifi() -> bytes:
    """`nmcli -t -c no -f ALL dev wifi list --rescan yes`"""
    return await run_nmcli(*SCAN_ARGS)


async def connect_wifi(target: str, interface: str | None = None) -> bytes:
    """`nmcli dev wifi connect <ssid|bssid> ifname <iface>`"""
    return await run_nmcli("dev", "wifi", "connect", target, "ifname", interface or settings.WIFI_INTERFACE)
