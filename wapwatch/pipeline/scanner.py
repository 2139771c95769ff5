import asyncio
import hashlib
import logging
from typing import Awaitable, Callable

from wapwatch.exceptions import NmcliError
from wapwatch.pipeline.channel import Channel
from wapwatch.services import nmcli

logger = logging.getLogger(__name__)

ScanRunner = Callable[[], Awaitable[bytes]]


class Scanner:
    """
    Периодический запуск nmcli и выдача сырых строк в канал.

    Отпечаток (SHA-256) последнего успешного вывода хранится в экземпляре:
    одинаковый вывод два раза подряд ничего не порождает.
    """

    def __init__(self, out: Channel[str], interval: float, runner: ScanRunner = nmcli.scan_wifi):
        self.out = out
        self.interval = interval
        self.runner = runner
        self.last_fingerprint: str | None = None

    async def scan_once(self) -> int:
        """Один проход сканирования. Возвращает число отправленных строк."""
        logger.debug("starting scan")
        try:
            raw = await self.runner()
        except NmcliError as e:
            logger.error(f"failed to exec nmcli: {e}")
            return 0
        if not raw:
            return 0

        fingerprint = hashlib.sha256(raw).hexdigest()
        if fingerprint == self.last_fingerprint:
            logger.debug("scan output unchanged, skipping")
            return 0
        self.last_fingerprint = fingerprint

        sent = 0
        for line in raw.decode("utf-8", errors="replace").splitlines():
            line = line.strip()
            if not line:
                continue
            await self.out.send(line)
            sent += 1
        logger.debug(f"scan produced {sent} lines")
        return sent

    async def run(self) -> None:
        """Сразу один проход, дальше раз в interval секунд (фиксированный шаг)."""
        logger.debug("starting scanner")
        loop = asyncio.get_running_loop()
        try:
            next_tick = loop.time()
            while True:
                await self.scan_once()
                # Пропущенные тики не накапливаются
                next_tick = max(next_tick + self.interval, loop.time())
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
        finally:
            logger.debug("closing scanner gracefully")
            self.out.close()
