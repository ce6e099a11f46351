# src/utils/date_utils.py
import calendar
import datetime
from typing import Union


def utc_today() -> datetime.date:
    """Data de hoje em UTC (o cron roda em UTC, igual ao Supabase)."""
    return datetime.datetime.now(datetime.timezone.utc).date()


def parse_date(value: Union[str, datetime.date]) -> datetime.date:
    """Converte 'AAAA-MM-DD' (ou um timestamp ISO vindo do Supabase) para date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value)[:10])


def format_date(value: datetime.date) -> str:
    return value.strftime("%Y-%m-%d")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: datetime.date, months: int, day: Union[int, None] = None) -> datetime.date:
    """
    Avança `months` meses a partir de `d`.
    O dia alvo é `day` (ou o dia atual de `d`), limitado ao tamanho do novo mês.
    Ex: add_months(2024-01-31, 1) -> 2024-02-29
    """
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    target_day = day if day else d.day
    return datetime.date(year, month, min(target_day, days_in_month(year, month)))
