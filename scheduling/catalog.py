"""Static time catalog: weekdays, hour bands, day-type groupings and the
age-based rule table used by the rules generator.

The catalog is built once at startup (``build_default_catalog``) and kept on
``app.extensions["schedule_catalog"]``; nothing in here is mutated afterwards.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from flask import current_app

from scheduling.keys import TimeRange


class DayType(str, Enum):
    WEEKDAY_TRIAD = "lun-mier-vier"  # Mon / Wed / Fri
    WEEKDAY_PAIR = "mar-juev"        # Tue / Thu
    WEEKEND_PAIR = "sab-dom"         # Sat / Sun

    @classmethod
    def parse(cls, value) -> "DayType":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown day type: {value!r}") from None


@dataclass(frozen=True)
class DayInfo:
    id: str
    name: str
    order: int


@dataclass(frozen=True)
class TimeBand:
    id: str
    label: str
    time_range: TimeRange
    default_capacity: int

    @property
    def time_slot(self) -> str:
        return str(self.time_range)


@dataclass(frozen=True)
class AgeRule:
    id: str
    time_id: str
    day_ids: tuple
    capacity: int
    allowed_ages: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class ScheduleCatalog:
    days: tuple
    bands: tuple
    rules: tuple
    # date.weekday() -> DayType
    day_types: tuple = (
        DayType.WEEKDAY_TRIAD,
        DayType.WEEKDAY_PAIR,
        DayType.WEEKDAY_TRIAD,
        DayType.WEEKDAY_PAIR,
        DayType.WEEKDAY_TRIAD,
        DayType.WEEKEND_PAIR,
        DayType.WEEKEND_PAIR,
    )

    def day_id_for(self, day: date) -> str:
        return self.days[day.weekday()].id

    def day_type_for(self, day: date) -> DayType:
        return self.day_types[day.weekday()]

    def band(self, band_id: str) -> Optional[TimeBand]:
        for b in self.bands:
            if b.id == band_id:
                return b
        return None

    def rule_for(self, day_id: str, band_id: str) -> Optional[AgeRule]:
        for r in self.rules:
            if r.time_id == band_id and day_id in r.day_ids:
                return r
        return None


def _band(band_id, label, time_slot, capacity=12):
    return TimeBand(band_id, label, TimeRange.parse(time_slot), capacity)


def build_default_catalog() -> ScheduleCatalog:
    days = (
        DayInfo("LUN", "Lunes", 1),
        DayInfo("MAR", "Martes", 2),
        DayInfo("MIE", "Miércoles", 3),
        DayInfo("JUE", "Jueves", 4),
        DayInfo("VIE", "Viernes", 5),
        DayInfo("SAB", "Sábado", 6),
        DayInfo("DOM", "Domingo", 7),
    )

    bands = (
        _band("06-07", "06:00 - 07:00", "06:00-07:00"),
        _band("07-08", "07:00 - 08:00", "07:00-08:00"),
        _band("08-09", "08:00 - 09:00", "08:00-09:00"),
        _band("09-10", "09:00 - 10:00", "09:00-10:00"),
        _band("10-11", "10:00 - 11:00", "10:00-11:00"),
        _band("11-12", "11:00 - 12:00", "11:00-12:00"),
        _band("12-13", "12:00 - 13:00", "12:00-13:00"),
        _band("13-14", "13:00 - 14:00", "13:00-14:00"),
        _band("14-1430", "14:00 - 14:30", "14:00-14:30", capacity=0),  # break
        _band("14:30-15:30", "14:30 - 15:30", "14:30-15:30"),
        _band("15:30-16:30", "15:30 - 16:30", "15:30-16:30"),
        _band("16:30-17:30", "16:30 - 17:30", "16:30-17:30"),
        _band("17:30-18:30", "17:30 - 18:30", "17:30-18:30"),
        _band("18:30-19:30", "18:30 - 19:30", "18:30-19:30"),
        _band("19:30-20:30", "19:30 - 20:30", "19:30-20:30"),
        _band("20:30-21:30", "20:30 - 21:30", "20:30-21:30"),
    )

    adults = frozenset(range(16, 101))
    teens = frozenset(range(11, 16))
    kids = frozenset(range(7, 11))
    preschool = frozenset(range(4, 7))
    aquababy = frozenset(range(1, 4))

    wd = ("LUN", "MAR", "MIE", "JUE", "VIE")
    we = ("SAB", "DOM")
    every = wd + we

    rules = (
        AgeRule("WD_06", "06-07", wd, 12, adults),
        AgeRule("WD_07", "07-08", wd, 12, adults),
        AgeRule("WD_08", "08-09", wd, 12, adults),
        AgeRule("WE_06", "06-07", we, 12, adults),
        AgeRule("WE_07", "07-08", we, 12, adults),
        AgeRule("WE_08", "08-09", we, 12, teens),
        AgeRule("WE_09", "09-10", we, 12, teens),
        AgeRule("WD_09", "09-10", wd, 12, teens),
        AgeRule("ALL_10", "10-11", every, 12, kids),
        AgeRule("ALL_11", "11-12", every, 12, kids),
        AgeRule("ALL_12", "12-13", every, 12, preschool),
        AgeRule("ALL_13", "13-14", every, 12, preschool),
        AgeRule("ALL_14", "14-1430", every, 0),
        AgeRule("WD_1430", "14:30-15:30", wd, 12, preschool),
        AgeRule("WE_1430", "14:30-15:30", we, 12, aquababy),
        AgeRule("WD_1530", "15:30-16:30", wd, 12, kids),
        AgeRule("WE_1530", "15:30-16:30", we, 12, aquababy),
        AgeRule("WD_1630", "16:30-17:30", wd, 12, kids),
        AgeRule("WE_1630", "16:30-17:30", we, 12, aquababy),
        AgeRule("WD_1730", "17:30-18:30", wd, 12, teens),
        AgeRule("WD_1830", "18:30-19:30", wd, 12, teens),
        AgeRule("WD_1930", "19:30-20:30", wd, 12, adults),
        AgeRule("WD_2030", "20:30-21:30", wd, 12, adults),
    )

    return ScheduleCatalog(days=days, bands=bands, rules=rules)


def get_catalog() -> ScheduleCatalog:
    return current_app.extensions["schedule_catalog"]
