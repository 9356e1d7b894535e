import calendar
from datetime import date
from typing import Optional

from models import db
from models.season import Season
from scheduling.errors import SeasonNotFoundError


def month_id(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_id(value: str) -> date:
    """"YYYY-MM" -> first day of that month."""
    year, month = (int(p) for p in value.split("-"))
    return date(year, month, 1)


def get_by_id(season_id: str) -> Optional[Season]:
    return db.session.get(Season, season_id)


def require_season(season_id: str) -> Season:
    season = get_by_id(season_id)
    if not season:
        raise SeasonNotFoundError()
    return season


def get_active_season(today: Optional[date] = None) -> Optional[Season]:
    """A manually activated season wins; otherwise the one covering this month."""
    seasons = Season.query.order_by(Season.start_month.desc()).all()

    for s in seasons:
        if s.is_active:
            return s

    current = month_id(today or date.today())
    for s in seasons:
        if s.start_month <= current <= s.end_month:
            return s
    return None


def season_date_range(season: Season) -> tuple[date, date]:
    """First day of the start month through the last day of the end month."""
    start = parse_month_id(season.start_month)
    end_first = parse_month_id(season.end_month)
    last_day = calendar.monthrange(end_first.year, end_first.month)[1]
    return start, end_first.replace(day=last_day)
