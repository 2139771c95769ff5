import logging

from wapwatch.exceptions import MalformedRecordError
from wapwatch.pipeline.channel import Channel
from wapwatch.schemas.wap import AccessPointObservation
from wapwatch.services.parser import parse_line

logger = logging.getLogger(__name__)


async def parse_worker(inp: Channel[str], out: Channel[AccessPointObservation], worker_id: int = 0) -> None:
    """Читает сырые строки, пока канал не закрыт; битые строки пропускает."""
    logger.debug(f"starting parser {worker_id}")
    async for line in inp:
        try:
            obs = parse_line(line)
        except MalformedRecordError as e:
            logger.warning(f"dropping nmcli line ({e}), fields={e.field_count}: {e.line!r}")
            continue
        if obs is None:
            continue
        logger.debug(f"parsed {obs.bssid} ({obs.ssid!r})")
        await out.send(obs)
    logger.debug(f"parser {worker_id} input closed")
