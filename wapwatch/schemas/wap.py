from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class AccessPointObservation(BaseModel):
    """Одна строка `nmcli -t -f ALL dev wifi list` после разбора."""
    ssid: str = Field("", description="SSID сети (пустой для скрытых)")
    ssid_hex: str = Field("", description="SSID в hex")
    bssid: str = Field(..., min_length=1, description="MAC-адрес (BSSID)", examples=["AA:BB:CC:DD:EE:FF"])
    mode: str = Field("", description="Режим (Infra, Ad-Hoc, ...)")
    chan: int = Field(..., description="Номер канала")
    freq: int = Field(..., description="Частота (MHz)")
    rate: int = Field(..., description="Скорость (Mbit/s)")
    bandwidth: int = Field(..., description="Ширина канала (MHz)")
    signal: int = Field(..., description="Уровень сигнала")
    security: str = Field("Open", description="Класс защиты, пустой нормализуется в Open")
    wpa_flags: str = Field("", description="WPA-флаги")
    rsn_flags: str = Field("", description="RSN-флаги")
    device: str = Field("", description="Сетевой интерфейс")
    active: str = Field("", description="Активна ли сеть (yes/no)")
    in_use: bool = Field(False, description="Интерфейс сейчас подключён к этой сети")
    dbus_path: str = Field("", description="D-Bus путь точки доступа")


class PersistedAccessPoint(AccessPointObservation):
    id: int = Field(..., description="Первичный ключ")
    ssid: Optional[str] = Field(None, description="SSID сети")
    password: Optional[str] = Field(None, description="Пароль (конвейером не заполняется)")
    successfully_connected: bool = Field(False, description="Было ли успешное подключение")
    created_at: datetime = Field(..., description="Время создания записи")
    updated_at: datetime = Field(..., description="Время последнего изменения")
    visible: bool = Field(True, description="Видна ли точка в эфире")

    model_config = {
        "from_attributes": True,
    }


class ChangeEvent(BaseModel):
    row: PersistedAccessPoint
    upserted: bool = Field(..., description="Строка новая или изменилась")


class WapListResponse(BaseModel):
    items: List[PersistedAccessPoint] = Field(..., description="Список точек доступа")
    total: int = Field(..., description="Общее количество подходящих точек доступа")
    limit: int = Field(..., description="Лимит на страницу")
    offset: int = Field(..., description="Смещение для пагинации")
