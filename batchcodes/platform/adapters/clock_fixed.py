from datetime import datetime, timedelta
from zoneinfo import ZoneInfo
from batchcodes.core.config import settings
from batchcodes.platform.ports.clock import ClockPort

class FixedClock(ClockPort):
    """Always reports the same instant until moved."""

    def __init__(self, at: datetime, tz: str | None = None):
        self.tz = ZoneInfo(tz or settings.TIMEZONE)
        self.set(at)

    def now(self) -> datetime:
        return self.at

    def set(self, at: datetime) -> None:
        # naive timestamps are taken as local to the configured zone
        self.at = at.replace(tzinfo=self.tz) if at.tzinfo is None else at.astimezone(self.tz)

    def advance(self, **delta) -> None:
        self.at = self.at + timedelta(**delta)
