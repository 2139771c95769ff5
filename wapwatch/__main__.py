import asyncio
import logging
import signal

from wapwatch.core.logging_config import setup_logging
from wapwatch.db.session import async_engine, AsyncSessionLocal, init_db
from wapwatch.pipeline.runner import leaf_exceptions, run_pipeline

logger = logging.getLogger("wapwatch")


async def serve() -> None:
    """
    Поднимает БД и конвейер; SIGINT/SIGTERM отменяют конвейер,
    после чего писатель делает последний сброс.
    """
    logger.info("starting...")
    await init_db(async_engine)

    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, task.cancel)

    try:
        try:
            await run_pipeline(AsyncSessionLocal)
        except asyncio.CancelledError:
            task.uncancel()
            logger.info("termination signal received, pipeline stopped")
    except ExceptionGroup as eg:
        for exc in leaf_exceptions(eg):
            logger.error(f"pipeline stopped with error: {exc!r}", exc_info=exc)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await async_engine.dispose()
    logger.info("complete")


def main() -> None:
    setup_logging()
    asyncio.run(serve())


if __name__ == "__main__":
    main()
