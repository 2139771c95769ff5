from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wapwatch.db.session import get_db
from wapwatch.core.config import settings
from wapwatch.schemas.wap import PersistedAccessPoint, WapListResponse
from wapwatch.services import wap as wap_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/waps", tags=["waps"])


@router.get(
    "/",
    response_model=WapListResponse,
    summary="Список известных точек доступа",
    description="Точки доступа, накопленные конвейером сканирования. Фильтры по security, ssid, visible, in_use; пагинация и сортировка.",
)
async def list_waps(
    security: str | None = Query(None, description="Класс защиты, например Open или WPA2"),
    ssid: str | None = Query(None, description="Фильтр по SSID"),
    visible: bool | None = Query(None, description="Фильтр по видимости"),
    in_use: bool | None = Query(None, description="Фильтр по текущему подключению"),
    limit: int = Query(100, ge=1, le=1000, description="Максимум записей на страницу (пагинация)"),
    offset: int = Query(0, ge=0, description="Смещение для пагинации"),
    order_by: str = Query("updated_at", description="Поле сортировки: id, bssid, signal, created_at, updated_at"),
    order_dir: str = Query("desc", description="Направление сортировки: asc или desc"),
    db: AsyncSession = Depends(get_db)
):
    items, total = await wap_service.list_waps(db, security, ssid, visible, in_use, limit, offset, order_by, order_dir)
    return WapListResponse(
        items=[PersistedAccessPoint.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{bssid}",
    response_model=PersistedAccessPoint,
    summary="Точка доступа по BSSID",
)
async def get_wap(
    bssid: str,
    db: AsyncSession = Depends(get_db)
):
    wap = await wap_service.get_wap(db, bssid)
    if not wap:
        raise HTTPException(status_code=404, detail=f"WAP with BSSID={bssid} not found")
    return PersistedAccessPoint.model_validate(wap)
