"""Фоновый монитор точек доступа Wi-Fi поверх nmcli."""

__version__ = "0.1.0"
