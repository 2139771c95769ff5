import asyncio
import logging
from datetime import timezone
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from wapwatch.exceptions import NmcliError
from wapwatch.services import nmcli
from wapwatch.services.wap import list_connect_candidates

logger = logging.getLogger(__name__)

JoinRunner = Callable[[str], Awaitable[bytes]]


class Connector:
    """
    Периодическая попытка подключиться к открытым точкам доступа.

    Берёт из БД открытые, видимые и не подключённые точки (свежие первыми)
    и для каждой один раз вызывает `nmcli dev wifi connect`. Скрытые точки
    (без SSID) пропускаются. Ошибка одной попытки не прерывает обход.
    Результат в БД не записывается.
    """

    def __init__(self, session_factory: sessionmaker, join: JoinRunner = nmcli.connect_wifi):
        self.session_factory = session_factory
        self.join = join
        self._inflight: asyncio.Task | None = None

    async def sweep(self) -> int:
        """Один обход кандидатов. Возвращает число успешных подключений."""
        self._inflight = asyncio.current_task()
        try:
            return await self._sweep()
        finally:
            self._inflight = None

    async def _sweep(self) -> int:
        try:
            async with self.session_factory() as db:
                candidates = await list_connect_candidates(db)
        except SQLAlchemyError as e:
            logger.error(f"failed to pull connect candidates: {e}")
            return 0

        connected = 0
        for wap in candidates:
            if not wap.ssid:
                logger.debug(f"skipping hidden WAP {wap.bssid}: no SSID to join")
                continue
            target = wap.ssid or wap.bssid
            last_seen = wap.updated_at
            if last_seen.tzinfo is None:
                last_seen = last_seen.replace(tzinfo=timezone.utc)
            logger.info(
                f"Available public WAP: SSID={wap.ssid!r} MAC={wap.bssid} "
                f"last_seen(local)={last_seen.astimezone()} last_seen(UTC)={last_seen}"
            )
            logger.info(f"attempting to connect to {target!r}")
            try:
                await self.join(target)
            except NmcliError as e:
                logger.error(f"failed to connect to {target!r}: {e}")
                continue
            connected += 1
            logger.info(f"connected to {target!r}")
            # TODO: после подключения проверить доступ в интернет (captive portal)
        return connected

    async def stop(self, timeout: float = 5.0) -> None:
        """Отменяет текущий обход и ждёт его завершения, не дольше timeout секунд."""
        task = self._inflight
        if task is None or task.done():
            return
        task.cancel()
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning(f"connect sweep did not stop within {timeout:g}s")
