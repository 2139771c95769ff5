import asyncio
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from wapwatch.pipeline.connector import Connector

logger = logging.getLogger(__name__)

CONNECT_JOB_ID = "connect_open_waps"


async def _run_connect_job(connector: Connector) -> None:
    """
    Обёртка для запуска обхода открытых точек доступа.
    """
    logger.info(f"Job '{CONNECT_JOB_ID}' started")
    try:
        connected = await connector.sweep()
    except asyncio.CancelledError:
        # Задачу джоба никто не ожидает, отмена при остановке не ошибка
        logger.info(f"Job '{CONNECT_JOB_ID}' cancelled")
        return
    logger.info(f"Job '{CONNECT_JOB_ID}' finished, connected={connected}")


def build_scheduler(connector: Connector, interval: float) -> AsyncIOScheduler:
    """
    Создаёт APScheduler с задачей connect_open_waps раз в interval секунд.
    Первый запуск через interval после старта.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _run_connect_job,
        trigger=IntervalTrigger(seconds=interval),
        args=[connector],
        id=CONNECT_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1
    )
    return scheduler


async def run_connector(connector: Connector, interval: float) -> None:
    """
    Стадия конвейера: держит планировщик запущенным до отмены.
    При отмене планировщик останавливается, текущий обход прерывается
    и дожидается своего завершения.
    """
    scheduler = build_scheduler(connector, interval)
    scheduler.start()
    logger.info(f"Scheduler started: job '{CONNECT_JOB_ID}' every {interval:g}s")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await connector.stop()
        logger.info("closing connector gracefully")
