from __future__ import annotations

import random
from datetime import date, datetime, timezone
from typing import Callable, Optional

from production_tracking.core.settings import AppSettings, get_app_settings


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseService:
    """
    Base class for engine services. Holds settings, a clock and a random source.

    Services keep business rules and orchestration, delegating collection
    lookups and rewrites to repositories. They hold no state between calls.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or get_app_settings()
        self.clock = clock or _utc_now
        self.rng = rng or random.Random()

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()
