from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from wapwatch.db.base import Base


class Wap(Base):
    __tablename__ = "waps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ssid = Column(String(255), nullable=True, index=True)
    ssid_hex = Column(String(64), nullable=True)
    bssid = Column(String(17), unique=True, nullable=False)
    mode = Column(String(32), nullable=True)
    chan = Column(Integer, nullable=True)
    freq = Column(Integer, nullable=True)
    rate = Column(Integer, nullable=True)
    bandwidth = Column(Integer, nullable=True)
    signal = Column(Integer, nullable=True)
    security = Column(String(64), nullable=True)
    wpa_flags = Column(String(255), nullable=True)
    rsn_flags = Column(String(255), nullable=True)
    device = Column(String(64), nullable=True)
    active = Column(String(16), nullable=True)
    in_use = Column(Boolean, nullable=False, default=False)
    dbus_path = Column(String(255), nullable=True)
    password = Column(Text, nullable=True)
    successfully_connected = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    visible = Column(Boolean, nullable=False, default=True)

    passwords = relationship("WapPassword", back_populates="wap", cascade="all, delete-orphan")
