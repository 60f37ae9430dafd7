"""Geração de horários e aritmética de intervalos da agenda.

Tudo aqui é puro (sem banco). Horários de expediente são "HH:mm" em 24h;
os horários mostrados ao cliente usam 12h com AM/PM ("9:30 AM").
Instantes são datetimes com tzinfo UTC.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

HHMM_RE = re.compile(r"^\d{2}:\d{2}$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DISPLAY_TIME_FORMAT = "%I:%M %p"


def _to_minutes(value: Optional[str]) -> Optional[int]:
    if not value or not HHMM_RE.match(value):
        return None
    hours, minutes = int(value[:2]), int(value[3:])
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def _format_hhmm(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def is_valid_hhmm(value: Optional[str]) -> bool:
    return _to_minutes(value) is not None


def generate_slots(
    work_start: str,
    work_end: str,
    step_minutes: int,
    service_duration_minutes: int,
) -> List[str]:
    """Horários de início candidatos ("HH:mm") dentro do expediente.

    Avança de ``step_minutes`` em ``step_minutes`` e para quando o serviço
    não cabe mais antes de ``work_end``. O passo é independente da duração:
    candidatos sobrepostos são filtrados depois, contra a agenda.
    """
    start = _to_minutes(work_start)
    end = _to_minutes(work_end)
    if start is None or end is None:
        logger.warning("Invalid start or end time for slot generation: %r, %r", work_start, work_end)
        return []

    if step_minutes <= 0 or service_duration_minutes <= 0:
        return []

    slots: List[str] = []
    current = start
    while current < end:
        if current + service_duration_minutes > end:
            break
        slots.append(_format_hhmm(current))
        current += step_minutes

    return slots


def parse_working_hours(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """"09:00-17:00" -> ("09:00", "17:00"); None se vazio ou mal formatado."""
    if not value:
        return None
    parts = value.strip().split("-")
    if len(parts) != 2:
        return None
    start, end = parts[0].strip(), parts[1].strip()
    if not (is_valid_hhmm(start) and is_valid_hhmm(end)):
        return None
    return start, end


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Retorna True se [a_start, a_end) sobrepõe [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def parse_calendar_date(value: str) -> date:
    """"YYYY-MM-DD" estrito; ValueError caso contrário."""
    if not DATE_RE.match(value):
        raise ValueError(f"invalid calendar date: {value!r}")
    return date.fromisoformat(value)


def day_bounds(d: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(d, time(0, 0), tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def slot_instant(d: date, hhmm: str) -> datetime:
    minutes = _to_minutes(hhmm)
    if minutes is None:
        raise ValueError(f"invalid time of day: {hhmm!r}")
    return datetime.combine(d, time(0, 0), tzinfo=timezone.utc) + timedelta(minutes=minutes)


def format_display_time(value: time) -> str:
    # "09:30 AM" -> "9:30 AM"
    return value.strftime(DISPLAY_TIME_FORMAT).lstrip("0")


def parse_display_time(value: str) -> time:
    return datetime.strptime(value.strip(), DISPLAY_TIME_FORMAT).time()


def format_appointment_time(value: datetime) -> str:
    """Texto das notificações: "Dec 10, 2025 at 9:30 AM"."""
    return f"{value:%b} {value.day}, {value.year} at {format_display_time(value.time())}"
