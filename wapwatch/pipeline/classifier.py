import logging

from wapwatch.pipeline.channel import Channel
from wapwatch.schemas.wap import ChangeEvent

logger = logging.getLogger(__name__)

OPEN = "Open"
PROTECTED = "Protected"
UNKNOWN = "Unknown"

PROTECTED_SECURITY = frozenset({"WPA", "WPA2", "WPA3", "WEP"})


def classify(security: str | None) -> str:
    if security == OPEN:
        return OPEN
    if security in PROTECTED_SECURITY:
        return PROTECTED
    return UNKNOWN


def log_change(event: ChangeEvent) -> str | None:
    """Пишет одну строку лога на изменённую точку. Возвращает класс или None."""
    if not event.upserted:
        return None
    wap = event.row
    category = classify(wap.security)
    if category == OPEN:
        logger.info(f"Public WAP spotted: SSID={wap.ssid!r} MAC={wap.bssid} mode={wap.mode}")
    elif category == PROTECTED:
        logger.info(f"Protected WAP spotted: security={wap.security} SSID={wap.ssid!r} MAC={wap.bssid} mode={wap.mode}")
    else:
        logger.info(f"Unknown WAP spotted: security={wap.security!r} SSID={wap.ssid!r} MAC={wap.bssid} mode={wap.mode}")
    return category


async def classify_worker(inp: Channel[ChangeEvent], worker_id: int = 0) -> None:
    logger.debug(f"starting classifier {worker_id}")
    async for event in inp:
        log_change(event)
    logger.debug(f"classifier {worker_id} input closed")
