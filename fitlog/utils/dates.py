# dates.py
from __future__ import annotations
from datetime import date, datetime, time
from typing import Optional

import pendulum as p

from ..config import FITLOG_TZ


def now_local(tz: Optional[str] = FITLOG_TZ) -> datetime:
    """Maintenant, naïf, tronqué à la minute (résolution des séances)."""
    now = p.now(tz) if tz else p.now()
    return truncate_minute(datetime(now.year, now.month, now.day, now.hour, now.minute))


def truncate_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def combine(d: date, t: time) -> datetime:
    return truncate_minute(datetime.combine(d, t))


def minutes_between(start: datetime, end: datetime) -> int:
    return int((truncate_minute(end) - truncate_minute(start)).total_seconds() // 60)


# ── formats d'affichage ──────────────────────────────────────────────────────
def fmt_date(d: date | datetime) -> str:
    """23/10/25"""
    return d.strftime("%d/%m/%y")


def fmt_time(t: time | datetime) -> str:
    """1900"""
    return t.strftime("%H%M")


def fmt_hm(dt: Optional[datetime]) -> str:
    return dt.strftime("%H:%M") if dt else "open"


def day_month(dt: Optional[datetime]) -> str:
    """Thu 23 Oct : colonne compacte du journal."""
    if dt is None:
        return "Unended"
    return p.instance(dt).format("ddd D MMM")


def long_format(dt: Optional[datetime]) -> str:
    """Thursday 23rd of October, 7:00 PM"""
    if dt is None:
        return "Unended"
    return p.instance(dt).format("dddd Do [of] MMMM, h:mm A")


def fmt_duration(minutes: int) -> str:
    h, m = divmod(max(0, int(minutes)), 60)
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"
