from datetime import datetime
from zoneinfo import ZoneInfo
from batchcodes.core.config import settings
from batchcodes.platform.ports.clock import ClockPort

class SystemClock(ClockPort):
    def __init__(self, tz: str | None = None):
        self.tz = ZoneInfo(tz or settings.TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self.tz)
