"""Typed identifiers for slots and time ranges."""
import re
from dataclasses import dataclass
from datetime import date, time

_RANGE_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])-([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def _fmt_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


@dataclass(frozen=True)
class TimeRange:
    """A wall-clock range within one day, in minutes since midnight."""
    start: int
    end: int

    @classmethod
    def parse(cls, text: str) -> "TimeRange":
        m = _RANGE_RE.match((text or "").strip())
        if not m:
            raise ValueError(f"invalid time range: {text!r}")
        sh, sm, eh, em = (int(g) for g in m.groups())
        start, end = sh * 60 + sm, eh * 60 + em
        if start >= end:
            raise ValueError(f"time range must end after it starts: {text!r}")
        return cls(start, end)

    def __str__(self) -> str:
        return f"{_fmt_minutes(self.start)}-{_fmt_minutes(self.end)}"

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def end_time(self) -> time:
        return time(self.end // 60, self.end % 60)

    def overlaps(self, other: "TimeRange") -> bool:
        return max(self.start, other.start) < min(self.end, other.end)

    def split(self, chunk_minutes: int = 60) -> list["TimeRange"]:
        """Split into consecutive chunks; the last one may be shorter."""
        if self.duration <= chunk_minutes:
            return [self]
        chunks = []
        cur = self.start
        while cur < self.end:
            nxt = min(cur + chunk_minutes, self.end)
            chunks.append(TimeRange(cur, nxt))
            cur = nxt
        return chunks


@dataclass(frozen=True)
class SlotKey:
    """Identity of a daily slot: calendar date plus time band.

    Formats as "YYYY-MM-DD_<band>". Parsing splits on the first underscore, so
    bands may themselves contain separators.
    """
    date: date
    band: str

    def __post_init__(self):
        if not self.band:
            raise ValueError("slot key needs a time band")

    def __str__(self) -> str:
        return f"{self.date.isoformat()}_{self.band}"

    @classmethod
    def parse(cls, text: str) -> "SlotKey":
        day, sep, band = (text or "").partition("_")
        if not sep or not band:
            raise ValueError(f"invalid slot key: {text!r}")
        try:
            d = date.fromisoformat(day)
        except ValueError:
            raise ValueError(f"invalid slot key date: {text!r}") from None
        return cls(d, band)
