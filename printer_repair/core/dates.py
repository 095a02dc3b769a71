"""
Fechas visibles en español (Colombia).

Los timestamps se guardan en UTC naive; aquí se convierten a la zona horaria
del negocio y se formatean sin depender del locale del sistema.
"""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

MONTHS = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

MONTHS_SHORT = [
    "ene.", "feb.", "mar.", "abr.", "may.", "jun.",
    "jul.", "ago.", "sept.", "oct.", "nov.", "dic.",
]


def to_local(value: datetime, tz_name: str) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name))


def _clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "a. m." if value.hour < 12 else "p. m."
    return f"{hour:02d}:{value.minute:02d} {suffix}"


def format_long(value: datetime, tz_name: str) -> str:
    """19 de octubre de 2026, 08:49 a. m."""
    local = to_local(value, tz_name)
    return f"{local.day} de {MONTHS[local.month - 1]} de {local.year}, {_clock(local)}"


def format_short(value: datetime, tz_name: str) -> str:
    """19 oct. 2026, 08:49 a. m."""
    local = to_local(value, tz_name)
    return f"{local.day} {MONTHS_SHORT[local.month - 1]} {local.year}, {_clock(local)}"


def format_day(value: datetime, tz_name: str) -> str:
    """19 oct. 2026"""
    local = to_local(value, tz_name)
    return f"{local.day} {MONTHS_SHORT[local.month - 1]} {local.year}"


def format_numeric(value: Optional[datetime], tz_name: str) -> str:
    """19/10/2026"""
    if value is None:
        return ""
    local = to_local(value, tz_name)
    return f"{local.day}/{local.month}/{local.year}"
