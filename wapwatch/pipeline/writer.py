import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from wapwatch.exceptions import ChannelClosed
from wapwatch.pipeline.channel import Channel
from wapwatch.schemas.wap import AccessPointObservation, ChangeEvent, PersistedAccessPoint
from wapwatch.services.wap import upsert_wap

logger = logging.getLogger(__name__)


class Writer:
    """
    Единственный писатель в БД.

    Копит наблюдения и сбрасывает их одной транзакцией, когда пачка
    достигла batch_size или истёк flush_every. После коммита по каждой
    записанной строке уходит ChangeEvent (upserted=True: новая или изменённая).
    При остановке делается последний сброс: буфер не теряется молча.
    """

    def __init__(
        self,
        inp: Channel[AccessPointObservation],
        out: Channel[ChangeEvent],
        session_factory: sessionmaker,
        batch_size: int,
        flush_every: float,
    ):
        self.inp = inp
        self.out = out
        self.session_factory = session_factory
        self.batch_size = batch_size
        self.flush_every = flush_every
        self.batch: list[AccessPointObservation] = []

    async def _persist(self, batch: list[AccessPointObservation]) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []
        now = datetime.now(timezone.utc)
        try:
            async with self.session_factory() as db:
                async with db.begin():
                    for obs in batch:
                        try:
                            async with db.begin_nested():
                                wap, changed = await upsert_wap(db, obs, now)
                        except SQLAlchemyError as e:
                            logger.error(f"upsert failed for {obs.bssid} ({obs.ssid!r}): {e}")
                            continue
                        events.append(ChangeEvent(
                            row=PersistedAccessPoint.model_validate(wap),
                            upserted=changed,
                        ))
        except SQLAlchemyError as e:
            # Транзакция уже откатана контекстным менеджером
            logger.error(f"commit failed, discarding batch of {len(batch)}: {e}")
            return []
        logger.debug(f"committed {len(events)}/{len(batch)} rows")
        return events

    async def _forward(self, events: list[ChangeEvent], draining: bool) -> None:
        if draining:
            # Потребители уже останавливаются: не ждём места в канале
            dropped = 0
            for event in events:
                if self.out.closed or self.out.full():
                    dropped += 1
                    continue
                await self.out.send(event)
            if dropped:
                logger.warning(f"{dropped} change events not forwarded during shutdown (rows are committed)")
            return

        for i, event in enumerate(events):
            try:
                await self.out.send(event)
            except asyncio.CancelledError:
                logger.warning(f"{len(events) - i} change events not forwarded during shutdown (rows are committed)")
                raise

    async def flush(self, draining: bool = False) -> int:
        """
        Сбрасывает текущую пачку. Возвращает число записанных строк.
        Пачка очищается при любом исходе. Начатый коммит доводится
        до конца даже при отмене задачи.
        """
        if not self.batch:
            return 0
        batch, self.batch = self.batch, []
        logger.debug(f"writing {len(batch)} records to db")

        persist = asyncio.ensure_future(self._persist(batch))
        cancelled = False
        while not persist.done():
            try:
                await asyncio.shield(persist)
            except asyncio.CancelledError:
                # Повторные отмены не прерывают коммит, отмена отдаётся один раз в конце
                if not cancelled:
                    logger.debug(f"cancelled mid-flush, finishing commit of {len(batch)} records")
                cancelled = True
        events = persist.result()
        if cancelled:
            await self._forward(events, draining=True)
            raise asyncio.CancelledError
        await self._forward(events, draining)
        return len(events)

    def _drain_input(self) -> None:
        """Забирает в пачку всё, что уже лежит во входном канале."""
        drained = 0
        while True:
            try:
                self.batch.append(self.inp.recv_nowait())
            except (asyncio.QueueEmpty, ChannelClosed):
                break
            drained += 1
        if drained:
            logger.debug(f"drained {drained} buffered records for the final flush")

    async def run(self) -> None:
        logger.debug("starting db writer")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.flush_every
        try:
            while True:
                try:
                    async with asyncio.timeout_at(deadline):
                        obs = await self.inp.recv()
                except TimeoutError:
                    await self.flush()
                    deadline = loop.time() + self.flush_every
                    continue
                except ChannelClosed:
                    await self.flush()
                    logger.debug("db writer input closed")
                    return
                self.batch.append(obs)
                if len(self.batch) >= self.batch_size:
                    await self.flush()
        except asyncio.CancelledError:
            self._drain_input()
            await self.flush(draining=True)
            logger.debug("closing db writer gracefully")
            raise
        finally:
            self.out.close()
