import asyncio
import logging

from sqlalchemy.orm import sessionmaker

from wapwatch.core.config import Settings, settings
from wapwatch.pipeline.channel import Channel
from wapwatch.pipeline.classifier import classify_worker
from wapwatch.pipeline.connector import Connector, JoinRunner
from wapwatch.pipeline.parser import parse_worker
from wapwatch.pipeline.scanner import Scanner, ScanRunner
from wapwatch.pipeline.writer import Writer
from wapwatch.schemas.wap import AccessPointObservation, ChangeEvent
from wapwatch.services import nmcli
from wapwatch.tasks.scheduler import run_connector

logger = logging.getLogger(__name__)


async def _parser_pool(raw: Channel[str], parsed: Channel[AccessPointObservation], workers: int) -> None:
    try:
        async with asyncio.TaskGroup() as pool:
            for i in range(workers):
                pool.create_task(parse_worker(raw, parsed, i), name=f"parser-{i}")
    finally:
        # Все парсеры вышли, писатель больше ничего не получит
        parsed.close()


async def _classifier_pool(committed: Channel[ChangeEvent], workers: int) -> None:
    async with asyncio.TaskGroup() as pool:
        for i in range(workers):
            pool.create_task(classify_worker(committed, i), name=f"classifier-{i}")


def leaf_exceptions(exc: BaseException) -> list[BaseException]:
    """Разворачивает вложенные ExceptionGroup от TaskGroup."""
    if isinstance(exc, BaseExceptionGroup):
        leaves = []
        for sub in exc.exceptions:
            leaves.extend(leaf_exceptions(sub))
        return leaves
    return [exc]


async def run_pipeline(
    session_factory: sessionmaker,
    config: Settings = settings,
    scan_runner: ScanRunner = nmcli.scan_wifi,
    join_runner: JoinRunner = nmcli.connect_wifi,
) -> None:
    """
    Запускает все стадии и ждёт их завершения.

    scanner -> raw -> parsers -> parsed -> writer -> committed -> classifiers,
    connector работает по своему расписанию напрямую с БД.
    Первая стадия, упавшая с настоящей ошибкой, отменяет остальные
    (ExceptionGroup летит наружу); отмена задачи снаружи останавливает
    всё штатно, с последним сбросом буфера писателя.
    """
    raw: Channel[str] = Channel(config.RAW_BUFFER)
    parsed: Channel[AccessPointObservation] = Channel(config.PARSED_BUFFER)
    committed: Channel[ChangeEvent] = Channel(config.COMMITTED_BUFFER)

    scanner = Scanner(raw, config.SCAN_EVERY, scan_runner)
    writer = Writer(parsed, committed, session_factory, config.BATCH_SIZE, config.FLUSH_EVERY)
    connector = Connector(session_factory, join_runner)

    logger.info(
        f"starting pipeline: scan every {config.SCAN_EVERY:g}s, flush every {config.FLUSH_EVERY:g}s, "
        f"{config.PARSER_WORKERS} parsers, {config.CLASSIFIER_WORKERS} classifiers"
    )
    try:
        async with asyncio.TaskGroup() as group:
            group.create_task(scanner.run(), name="scanner")
            group.create_task(_parser_pool(raw, parsed, config.PARSER_WORKERS), name="parsers")
            group.create_task(writer.run(), name="writer")
            group.create_task(_classifier_pool(committed, config.CLASSIFIER_WORKERS), name="classifiers")
            if config.CONNECT_ENABLED:
                group.create_task(run_connector(connector, config.CONNECT_EVERY), name="connector")
    finally:
        leftover = raw.qsize()
        if leftover:
            logger.warning(f"{leftover} raw nmcli lines dropped at shutdown (re-offered by the next scan)")
