from datetime import datetime, time, timedelta, timezone
from typing import Iterable

from ..domain.hour import FactoryConfig, Hour
from ..queries import DateView, HourView


def day_range(date_from: datetime, date_to: datetime) -> tuple[datetime, datetime]:
    """[start of first day, start of the day after the last one) in UTC."""
    start = datetime.combine(date_from.date(), time(0), tzinfo=timezone.utc)
    end = datetime.combine(date_to.date(), time(0), tzinfo=timezone.utc) + timedelta(days=1)
    return start, end


def build_dates(
    hours: Iterable[Hour],
    date_from: datetime,
    date_to: datetime,
    config: FactoryConfig,
) -> list[DateView]:
    """
    Calendar view of [date_from, date_to]: every day is listed and every hour of
    the configured UTC band is present, not available unless stored otherwise.
    """
    by_time = {h.time: h for h in hours}

    dates = []
    day = date_from.date()
    while day <= date_to.date():
        slots: dict[datetime, HourView] = {}
        for utc_hour in range(config.min_utc_hour, config.max_utc_hour + 1):
            if utc_hour > 23:
                break
            slot = datetime.combine(day, time(utc_hour), tzinfo=timezone.utc)
            slots[slot] = HourView(hour=slot, available=False, has_training_scheduled=False)

        for hour_time, h in by_time.items():
            if hour_time.date() != day:
                continue
            slots[hour_time] = HourView(
                hour=hour_time,
                available=h.is_available(),
                has_training_scheduled=h.has_training_scheduled(),
            )

        views = [slots[k] for k in sorted(slots)]
        dates.append(DateView(
            date=day,
            has_free_hours=any(v.available for v in views),
            hours=views,
        ))
        day += timedelta(days=1)

    return dates
