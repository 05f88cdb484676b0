"""Tests for SchedulePreferenceService."""
from datetime import date

import pytest

from cadence.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from cadence.services.schedule_preferences import (
    SchedulePreferenceService,
    normalize_preferred_days,
    validate_preference_fields,
)
from tests.conftest import OTHER_USER_ID, OWNER_ID


class TestPreferenceValidation:
    def test_days_are_sorted_and_deduplicated(self):
        assert normalize_preferred_days([5, 1, 3, 1]) == [1, 3, 5]

    @pytest.mark.parametrize("days", [[], [7], [-1], ["monday"], None])
    def test_invalid_days(self, days):
        with pytest.raises(ValidationError) as exc_info:
            normalize_preferred_days(days)
        assert exc_info.value.code == "VAL_PREFERRED_DAYS_001"

    @pytest.mark.parametrize(
        "fields, code",
        [
            ({"reschedule_window_weeks": 0}, "VAL_RESCHEDULE_WINDOW_WEEKS_001"),
            ({"min_rest_days": -1}, "VAL_MIN_REST_DAYS_001"),
            ({"max_consecutive_workout_days": -2}, "VAL_MAX_CONSECUTIVE_WORKOUT_DAYS_001"),
            ({"preferred_time_slot": "noon"}, "VAL_PREFERRED_TIME_SLOT_001"),
            ({"reminder_time": "7:00"}, "VAL_REMINDER_TIME_001"),
            ({"reminder_time": "24:00"}, "VAL_REMINDER_TIME_001"),
        ],
    )
    def test_invalid_fields(self, fields, code):
        with pytest.raises(ValidationError) as exc_info:
            validate_preference_fields(fields)
        assert exc_info.value.code == code

    def test_none_and_unknown_fields_dropped(self):
        cleaned = validate_preference_fields({"min_rest_days": None, "colour": "blue", "reminder_time": "07:30"})
        assert cleaned == {"reminder_time": "07:30"}

    def test_zero_cap_allowed(self):
        assert validate_preference_fields({"max_consecutive_workout_days": 0}) == {"max_consecutive_workout_days": 0}


class TestSchedulePreferenceService:
    @pytest.mark.asyncio
    async def test_create_uses_defaults(self, db, enrollment):
        service = SchedulePreferenceService(db)
        preference = await service.upsert(enrollment.id, OWNER_ID)

        assert preference.enrollment_id == enrollment.id
        assert preference.user_id == OWNER_ID
        assert preference.preferred_days == [1, 3, 5]
        assert preference.auto_reschedule_enabled is True
        assert preference.reschedule_window_weeks == 2
        assert preference.min_rest_days == 1
        assert preference.max_consecutive_workout_days == 3

    @pytest.mark.asyncio
    async def test_update_only_touches_given_fields(self, db, enrollment):
        service = SchedulePreferenceService(db)
        await service.upsert(enrollment.id, OWNER_ID, {"preferred_days": [2, 4], "min_rest_days": 0})
        preference = await service.upsert(enrollment.id, OWNER_ID, {"preferred_time_slot": "evening"})

        assert preference.preferred_days == [2, 4]
        assert preference.min_rest_days == 0
        assert preference.preferred_time_slot == "evening"

    @pytest.mark.asyncio
    async def test_one_preference_per_enrollment(self, db, enrollment):
        service = SchedulePreferenceService(db)
        first = await service.upsert(enrollment.id, OWNER_ID)
        second = await service.upsert(enrollment.id, OWNER_ID, {"reschedule_window_weeks": 3})
        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_invalid_update_writes_nothing(self, db, enrollment):
        service = SchedulePreferenceService(db)
        with pytest.raises(ValidationError):
            await service.upsert(enrollment.id, OWNER_ID, {"preferred_days": [1, 9]})
        assert await service.find(enrollment.id, OWNER_ID) is None

    @pytest.mark.asyncio
    async def test_get_without_preference(self, db, enrollment):
        with pytest.raises(NotFoundError) as exc_info:
            await SchedulePreferenceService(db).get(enrollment.id, OWNER_ID)
        assert exc_info.value.code == "NF_SCHEDULEPREFERENCE_001"

    @pytest.mark.asyncio
    async def test_unknown_enrollment(self, db, enrollment):
        with pytest.raises(NotFoundError):
            await SchedulePreferenceService(db).upsert(9999, OWNER_ID)

    @pytest.mark.asyncio
    async def test_foreign_enrollment_forbidden(self, db, other_enrollment):
        with pytest.raises(AuthorizationError):
            await SchedulePreferenceService(db).upsert(other_enrollment.id, OWNER_ID)

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, db, enrollment):
        service = SchedulePreferenceService(db)
        await service.upsert(enrollment.id, OWNER_ID)

        paused = await service.pause(enrollment.id, OWNER_ID, date(2025, 2, 1), "travel")
        assert paused.paused_until == date(2025, 2, 1)
        assert paused.pause_reason == "travel"
        assert paused.is_paused(date(2025, 1, 31))
        assert not paused.is_paused(date(2025, 2, 1))

        resumed = await service.resume(enrollment.id, OWNER_ID)
        assert resumed.paused_until is None
        assert resumed.pause_reason is None

    def test_defaults_follow_settings(self):
        from cadence.config.settings import Settings

        service = SchedulePreferenceService(None, Settings(default_preferred_days=[6, 0]))
        assert service.defaults()["preferred_days"] == [0, 6]

    @pytest.mark.asyncio
    async def test_other_user_cannot_pause(self, db, other_enrollment):
        with pytest.raises(AuthorizationError):
            await SchedulePreferenceService(db).pause(other_enrollment.id, OWNER_ID, date(2025, 2, 1))

    @pytest.mark.asyncio
    async def test_owner_of_other_enrollment_can_use_it(self, db, other_enrollment):
        preference = await SchedulePreferenceService(db).upsert(other_enrollment.id, OTHER_USER_ID)
        assert preference.user_id == OTHER_USER_ID
