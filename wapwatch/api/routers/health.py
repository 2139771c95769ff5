import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wapwatch.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", summary="Health check")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Доступность БД; конвейер пишет в тот же файл, API только читает."""
    try:
        result = await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"health check query failed: {e}")
        return {"db_ok": False}
    return {"db_ok": result.scalar() == 1}
