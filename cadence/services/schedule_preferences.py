"""
SchedulePreferenceService - Per-enrollment scheduling preferences.

Responsible for:
- Validating preferred weekdays, rest/run limits and reminder hints
- Creating a preference row with configured defaults, or patching an existing one
- Pausing and resuming a schedule

Never touches scheduled workout rows.
"""
import re
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config.settings import Settings, get_settings
from cadence.core.exceptions import NotFoundError, ValidationError
from cadence.core.logging import get_logger
from cadence.models.enums import TimeSlot
from cadence.models.program import ProgramEnrollment
from cadence.models.schedule import SchedulePreference
from cadence.repositories.schedule_preference_repository import SchedulePreferenceRepository
from cadence.services.base import BaseService


logger = get_logger(__name__)

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

PREFERENCE_FIELDS = (
    "preferred_days",
    "preferred_time_slot",
    "reminder_time",
    "auto_reschedule_enabled",
    "reschedule_window_weeks",
    "min_rest_days",
    "max_consecutive_workout_days",
)


def validate_time_of_day(field: str, value: str | None) -> str | None:
    """Accept ``None`` or an ``HH:MM`` 24-hour string."""
    if value is None:
        return None
    if not isinstance(value, str) or not HHMM_PATTERN.match(value):
        raise ValidationError(field, "must be a time in HH:MM format")
    return value


def normalize_preferred_days(value: Any) -> list[int]:
    """Sorted, de-duplicated weekday list (0=Sunday ... 6=Saturday)."""
    if not isinstance(value, (list, tuple, set, frozenset)) or not value:
        raise ValidationError("preferred_days", "at least one weekday is required")
    for day in value:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise ValidationError(
                "preferred_days",
                "weekdays must be integers between 0 (Sunday) and 6 (Saturday)",
                {"field": "preferred_days", "value": day},
            )
    return sorted(set(value))


def _non_negative(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(field, "must be a non-negative integer")
    return value


def validate_preference_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check every provided field and return the cleaned values.

    Unknown keys and ``None`` values are dropped; nothing is written when any
    field is invalid.
    """
    cleaned: dict[str, Any] = {}
    for key in PREFERENCE_FIELDS:
        if fields.get(key) is None:
            continue
        value = fields[key]

        if key == "preferred_days":
            value = normalize_preferred_days(value)
        elif key == "preferred_time_slot":
            allowed = [slot.value for slot in TimeSlot]
            if value not in allowed:
                raise ValidationError(key, f"must be one of {', '.join(allowed)}")
        elif key == "reminder_time":
            value = validate_time_of_day(key, value)
        elif key == "auto_reschedule_enabled":
            if not isinstance(value, bool):
                raise ValidationError(key, "must be a boolean")
        elif key == "reschedule_window_weeks":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(key, "must be a positive integer")
        else:
            value = _non_negative(key, value)

        cleaned[key] = value
    return cleaned


class SchedulePreferenceService(BaseService):
    """Reads and writes the one preference row each enrollment may have."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        super().__init__(db)
        self._settings = settings or get_settings()
        self._preference_repo = SchedulePreferenceRepository(db)

    def defaults(self) -> dict[str, Any]:
        return {
            "preferred_days": normalize_preferred_days(self._settings.default_preferred_days),
            "auto_reschedule_enabled": True,
            "reschedule_window_weeks": self._settings.default_reschedule_window_weeks,
            "min_rest_days": self._settings.default_min_rest_days,
            "max_consecutive_workout_days": self._settings.default_max_consecutive_workout_days,
        }

    async def get_owned_enrollment(self, enrollment_id: int, owner_id: int) -> ProgramEnrollment:
        enrollment = await self._get_or_404(ProgramEnrollment, enrollment_id)
        self._ensure_owner(enrollment, owner_id, "ProgramEnrollment")
        return enrollment

    async def find(self, enrollment_id: int, owner_id: int) -> SchedulePreference | None:
        await self.get_owned_enrollment(enrollment_id, owner_id)
        return await self._preference_repo.get_by_enrollment(enrollment_id)

    async def get(self, enrollment_id: int, owner_id: int) -> SchedulePreference:
        preference = await self.find(enrollment_id, owner_id)
        if preference is None:
            raise NotFoundError(
                "SchedulePreference",
                f"No schedule exists for enrollment {enrollment_id}",
                {"enrollment_id": enrollment_id},
            )
        return preference

    async def upsert(
        self,
        enrollment_id: int,
        owner_id: int,
        fields: dict[str, Any] | None = None,
    ) -> SchedulePreference:
        """Create the preference with defaults, or patch only the given fields."""
        enrollment = await self.get_owned_enrollment(enrollment_id, owner_id)
        cleaned = validate_preference_fields(fields or {})

        preference = await self._preference_repo.get_by_enrollment(enrollment_id)
        if preference is None:
            values = {**self.defaults(), **cleaned}
            preference = await self._preference_repo.create(
                SchedulePreference(enrollment_id=enrollment.id, user_id=enrollment.user_id, **values)
            )
            logger.info("schedule_preference.created", enrollment_id=enrollment_id, schedule_id=preference.id)
            return preference

        if cleaned:
            preference = await self._preference_repo.update(preference.id, cleaned)
            logger.info(
                "schedule_preference.updated",
                enrollment_id=enrollment_id,
                schedule_id=preference.id,
                fields=sorted(cleaned),
            )
        return preference

    async def pause(
        self,
        enrollment_id: int,
        owner_id: int,
        paused_until: date,
        reason: str | None = None,
    ) -> SchedulePreference:
        preference = await self.get(enrollment_id, owner_id)
        preference = await self._preference_repo.update(
            preference.id, {"paused_until": paused_until, "pause_reason": reason}
        )
        logger.info("schedule_preference.paused", schedule_id=preference.id, paused_until=str(paused_until))
        return preference

    async def resume(self, enrollment_id: int, owner_id: int) -> SchedulePreference:
        preference = await self.get(enrollment_id, owner_id)
        preference = await self._preference_repo.update(
            preference.id, {"paused_until": None, "pause_reason": None}
        )
        logger.info("schedule_preference.resumed", schedule_id=preference.id)
        return preference
