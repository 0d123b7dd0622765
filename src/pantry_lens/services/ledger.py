"""Date-partitioned nutrition ledger on top of a key-value store."""

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from pantry_lens.domain.meals import MealRecord
from pantry_lens.domain.nutrition import DailyTotals, NutritionFacts, PeriodSummary
from pantry_lens.services.storage import KeyValueStore

PARTITION_PREFIX = "meals_"

_logger = logging.getLogger(__name__)


@dataclass
class NutritionLedger:
    """Append-only meal log, one partition per calendar date.

    Each partition is one store key holding the day's records in logging
    order. Appends to the same partition are serialized by a lock so
    concurrent logging never drops a record. Totals are always summed from
    the stored records.
    """

    store: KeyValueStore
    timezone_name: str = "UTC"
    _partition_locks: dict[str, threading.Lock] = field(
        default_factory=dict, repr=False
    )
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def append(self, day: date, record: MealRecord) -> None:
        """Append a record to the day's partition."""
        key = partition_key(day)
        with self._lock_for(key):
            records = self._load(key)
            records.append(record)
            self.store.set(key, _encode(records))
        _logger.info(
            "Meal logged: day=%s name=%r calories=%s",
            day.isoformat(),
            record.name,
            record.nutrition.calories,
        )

    def meals_for(self, day: date) -> list[MealRecord]:
        """Return the day's records in logging order."""
        return self._load(partition_key(day))

    def daily_totals(self, day: date) -> NutritionFacts:
        """Sum all four nutrition fields across the day's records."""
        return sum_nutrition(self.meals_for(day))

    def period_summary(self, start: date, days: int) -> PeriodSummary:
        """Return per-day totals and averages for `days` days from `start`."""
        daily = [
            DailyTotals(day=day, nutrition=self.daily_totals(day))
            for day in (start + timedelta(days=offset) for offset in range(days))
        ]
        total = NutritionFacts.zero()
        for entry in daily:
            total = total + entry.nutrition
        total_days = max(len(daily), 1)
        return PeriodSummary(
            daily=daily,
            avg_calories=total.calories / total_days,
            avg_protein_g=total.protein_g / total_days,
            avg_carbs_g=total.carbs_g / total_days,
            avg_fat_g=total.fat_g / total_days,
        )

    def today(self) -> date:
        """Return the current calendar date in the ledger's timezone."""
        return datetime.now(tz=ZoneInfo(self.timezone_name)).date()

    def day_of(self, record: MealRecord) -> date:
        """Return the local calendar date a record was logged on."""
        logged_at = datetime.fromisoformat(record.timestamp)
        if logged_at.tzinfo is None:
            return logged_at.date()
        return logged_at.astimezone(ZoneInfo(self.timezone_name)).date()

    def clear_all(self) -> None:
        """Delete every partition and the profile. Irreversible."""
        with self._locks_guard:
            held = list(self._partition_locks.values())
            for lock in held:
                lock.acquire()
            try:
                self.store.clear()
            finally:
                for lock in held:
                    lock.release()
        _logger.warning("All ledger partitions and the profile were cleared")

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._partition_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._partition_locks[key] = lock
            return lock

    def _load(self, key: str) -> list[MealRecord]:
        raw = self.store.get(key)
        if raw is None:
            return []
        return [_decode_record(item) for item in json.loads(raw.decode("utf-8"))]


def sum_nutrition(records: list[MealRecord]) -> NutritionFacts:
    """Total of the records' nutrition; zero for no records."""
    total = NutritionFacts.zero()
    for record in records:
        total = total + record.nutrition
    return total


def partition_key(day: date) -> str:
    """Store key for a calendar date partition."""
    return f"{PARTITION_PREFIX}{day.isoformat()}"


def _encode(records: list[MealRecord]) -> bytes:
    return json.dumps([asdict(record) for record in records]).encode("utf-8")


def _decode_record(payload: dict[str, object]) -> MealRecord:
    nutrition = payload.get("nutrition") or {}
    return MealRecord(
        name=str(payload.get("name", "")),
        nutrition=NutritionFacts(
            calories=int(nutrition.get("calories", 0)),
            protein_g=float(nutrition.get("protein_g", 0.0)),
            carbs_g=float(nutrition.get("carbs_g", 0.0)),
            fat_g=float(nutrition.get("fat_g", 0.0)),
        ),
        servings=float(payload.get("servings", 1.0)),
        timestamp=str(payload.get("timestamp", "")),
    )
