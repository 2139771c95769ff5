from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wapwatch.db.models.wap import Wap
from wapwatch.schemas.wap import AccessPointObservation

OPEN_SECURITY = "Open"

# Поля, которые переписываются при каждом наблюдении (bssid: ключ)
MUTABLE_FIELDS = (
    "ssid", "ssid_hex", "mode", "chan", "freq", "rate", "bandwidth", "signal",
    "security", "wpa_flags", "rsn_flags", "device", "active", "in_use", "dbus_path",
)


async def get_wap(db: AsyncSession, bssid: str) -> Wap | None:
    result = await db.execute(select(Wap).where(Wap.bssid == bssid))
    return result.scalars().first()


async def upsert_wap(
    db: AsyncSession,
    obs: AccessPointObservation,
    now: datetime | None = None,
) -> tuple[Wap, bool]:
    """
    Вставка или обновление точки доступа по BSSID (read-before-write).

    Возвращает (строка, изменилась_ли). "Изменилась": строка новая
    либо отличается хотя бы одно изменяемое поле; тогда updated_at = now.
    visible выставляется в True всегда. Коммит делает вызывающая сторона.
    """
    now = now or datetime.now(timezone.utc)
    wap = await get_wap(db, obs.bssid)
    values = obs.model_dump(include=set(MUTABLE_FIELDS))

    if wap is None:
        wap = Wap(
            bssid=obs.bssid,
            **values,
            successfully_connected=False,
            created_at=now,
            updated_at=now,
            visible=True,
        )
        db.add(wap)
        await db.flush()
        return wap, True

    changed = any(getattr(wap, k) != v for k, v in values.items())
    if changed:
        for k, v in values.items():
            setattr(wap, k, v)
        wap.updated_at = now
    wap.visible = True
    await db.flush()
    return wap, changed


async def list_connect_candidates(db: AsyncSession) -> list[Wap]:
    """Открытые, видимые и не подключённые сейчас точки, свежие первыми."""
    stmt = (
        select(Wap)
        .where(Wap.security == OPEN_SECURITY)
        .where(Wap.in_use.is_(False))
        .where(Wap.visible.is_(True))
        .order_by(Wap.updated_at.desc())
        # .order_by(Wap.signal.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_waps(
    db: AsyncSession,
    security: str | None = None,
    ssid: str | None = None,
    visible: bool | None = None,
    in_use: bool | None = None,
    limit: int = 100,
    offset: int = 0,
    order_by: str = "updated_at",
    order_dir: str = "desc"
) -> tuple[list[Wap], int]:
    filters = []
    if security is not None:
        filters.append(Wap.security == security)
    if ssid is not None:
        filters.append(Wap.ssid == ssid)
    if visible is not None:
        filters.append(Wap.visible.is_(visible))
    if in_use is not None:
        filters.append(Wap.in_use.is_(in_use))

    # Сортировка
    order_fields = {
        "id": Wap.id,
        "bssid": Wap.bssid,
        "signal": Wap.signal,
        "created_at": Wap.created_at,
        "updated_at": Wap.updated_at,
    }
    order_col = order_fields.get(order_by, Wap.updated_at)
    order_col = order_col.asc() if order_dir == "asc" else order_col.desc()

    stmt = select(Wap).where(*filters).order_by(order_col, Wap.id).limit(limit).offset(offset)
    items = list((await db.execute(stmt)).scalars().all())
    total = (await db.execute(select(func.count()).select_from(Wap).where(*filters))).scalar_one()
    return items, total
