from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..config import settings


def local_today() -> date:
    """Fecha actual en la zona horaria configurada (no la del servidor)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()
