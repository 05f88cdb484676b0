"""End-to-end tests of the HTTP surface over the test database."""
from datetime import date

import pytest

from cadence.api.routes import dependencies
from cadence.api.routes.dependencies import get_current_user_id, get_reference_date
from tests.conftest import OTHER_USER_ID


async def generate(client, enrollment_id, **body):
    response = await client.post(f"/enrollments/{enrollment_id}/schedule", json=body or None)
    assert response.status_code == 201, response.text
    return response.json()


class TestScheduleRoutes:
    @pytest.mark.asyncio
    async def test_get_before_generation_returns_defaults(self, client, enrollment):
        response = await client.get(f"/enrollments/{enrollment.id}/schedule")

        assert response.status_code == 200
        data = response.json()
        assert data["needs_generation"] is True
        assert data["schedule"] is None
        assert data["preferences"]["preferred_days"] == [1, 3, 5]

    @pytest.mark.asyncio
    async def test_generate_and_read_back(self, client, enrollment):
        data = await generate(client, enrollment.id, preferences={"preferred_days": [1, 3, 5]})

        assert data["total_workouts"] == 6
        assert data["start_date"] == "2025-01-06"
        assert data["end_date"] == "2025-01-17"
        assert data["scheduled_workouts"][0]["program_workout"]["name"] == "Week 1 Day 1"
        assert data["scheduled_workouts"][0]["original_date"] == "2025-01-06"

        response = await client.get(
            f"/enrollments/{enrollment.id}/schedule", params={"start_date": "2025-01-13"}
        )
        listed = response.json()
        assert listed["needs_generation"] is False
        assert [w["scheduled_date"] for w in listed["scheduled_workouts"]] == [
            "2025-01-13", "2025-01-15", "2025-01-17",
        ]

    @pytest.mark.asyncio
    async def test_generate_twice_conflicts(self, client, enrollment):
        await generate(client, enrollment.id)

        response = await client.post(f"/enrollments/{enrollment.id}/schedule")

        assert response.status_code == 409
        body = response.json()
        assert body["data"] is None
        assert body["errors"][0]["code"] == "CF_SCHEDULE_EXISTS"

        regenerated = await generate(client, enrollment.id, regenerate=True, preferences={"preferred_days": [2, 4]})
        assert regenerated["start_date"] == "2025-01-07"

    @pytest.mark.asyncio
    async def test_put_preferences_validates(self, client, enrollment):
        response = await client.put(f"/enrollments/{enrollment.id}/schedule", json={"preferred_days": [0, 8]})

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "VAL_PREFERRED_DAYS_001"

        response = await client.put(
            f"/enrollments/{enrollment.id}/schedule",
            json={"preferred_days": [6, 0, 6], "reminder_time": "07:45"},
        )
        assert response.status_code == 200
        assert response.json()["preferred_days"] == [0, 6]
        assert response.json()["reminder_time"] == "07:45"

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, client, enrollment):
        await generate(client, enrollment.id)

        response = await client.post(
            f"/enrollments/{enrollment.id}/schedule/pause",
            json={"paused_until": "2025-02-01", "pause_reason": "holiday"},
        )
        assert response.status_code == 200
        assert response.json()["paused_until"] == "2025-02-01"

        response = await client.post(f"/enrollments/{enrollment.id}/schedule/resume")
        assert response.status_code == 200
        assert response.json()["paused_until"] is None

    @pytest.mark.asyncio
    async def test_foreign_enrollment_forbidden(self, client, other_enrollment):
        response = await client.get(f"/enrollments/{other_enrollment.id}/schedule")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_enrollment(self, client):
        response = await client.get("/enrollments/777/schedule")
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "NF_PROGRAMENROLLMENT_001"


class TestScheduledWorkoutRoutes:
    @pytest.mark.asyncio
    async def test_reschedule_conflict_and_success(self, client, enrollment):
        workouts = (await generate(client, enrollment.id))["scheduled_workouts"]
        first_id = workouts[0]["id"]

        response = await client.put(
            f"/schedule/workouts/{first_id}", json={"action": "reschedule", "new_date": "2025-01-08"}
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "CF_DATE_CONFLICT"

        unchanged = (await client.get(f"/schedule/workouts/{first_id}")).json()
        assert unchanged["scheduled_date"] == "2025-01-06"
        assert unchanged["rescheduled_count"] == 0

        response = await client.put(
            f"/schedule/workouts/{first_id}",
            json={"action": "reschedule", "new_date": "2025-01-07", "reschedule_reason": "busy"},
        )
        assert response.status_code == 200
        workout = response.json()["workout"]
        assert workout["scheduled_date"] == "2025-01-07"
        assert workout["rescheduled_from"] == "2025-01-06"
        assert workout["original_date"] == "2025-01-06"
        assert workout["rescheduled_count"] == 1

    @pytest.mark.asyncio
    async def test_skip_then_complete(self, client, enrollment):
        workout_id = (await generate(client, enrollment.id))["scheduled_workouts"][0]["id"]

        response = await client.put(f"/schedule/workouts/{workout_id}", json={"action": "skip", "skip_reason": "flu"})
        assert response.json()["workout"]["status"] == "skipped"

        response = await client.put(
            f"/schedule/workouts/{workout_id}", json={"action": "complete", "workout_session_id": "abc"}
        )
        assert response.status_code == 200
        workout = response.json()["workout"]
        assert workout["status"] == "completed"
        assert workout["skipped_reason"] is None
        assert workout["completed_workout_session_ref"] == "abc"

    @pytest.mark.asyncio
    async def test_invalid_transition(self, client, enrollment):
        workout_id = (await generate(client, enrollment.id))["scheduled_workouts"][0]["id"]

        response = await client.put(f"/schedule/workouts/{workout_id}", json={"action": "unschedule"})

        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "BR_INVALID_TRANSITION"

    @pytest.mark.asyncio
    async def test_unknown_action_rejected_by_schema(self, client, enrollment):
        workout_id = (await generate(client, enrollment.id))["scheduled_workouts"][0]["id"]
        response = await client.put(f"/schedule/workouts/{workout_id}", json={"action": "teleport"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client, api_app, enrollment):
        workout_id = (await generate(client, enrollment.id))["scheduled_workouts"][0]["id"]

        api_app.dependency_overrides[get_current_user_id] = lambda: OTHER_USER_ID
        response = await client.get(f"/schedule/workouts/{workout_id}")

        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "AUTH_006"

    @pytest.mark.asyncio
    async def test_delete(self, client, enrollment):
        workout_id = (await generate(client, enrollment.id))["scheduled_workouts"][0]["id"]

        response = await client.delete(f"/schedule/workouts/{workout_id}")
        assert response.status_code == 204

        response = await client.get(f"/schedule/workouts/{workout_id}")
        assert response.status_code == 404


class TestAutoRescheduleRoutes:
    @pytest.mark.asyncio
    async def test_sweep_requires_admin_token(self, client, enrollment, monkeypatch):
        monkeypatch.setattr(dependencies.settings, "admin_api_token", "s3cret")

        response = await client.post("/schedule/missed-sweep", json={"reference_date": "2025-01-09"})
        assert response.status_code == 403

        response = await client.post(
            "/schedule/missed-sweep",
            json={"reference_date": "2025-01-09"},
            headers={"X-Admin-Token": "wrong"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_sweep_then_auto_reschedule(self, client, api_app, enrollment, monkeypatch):
        monkeypatch.setattr(dependencies.settings, "admin_api_token", "s3cret")
        await generate(client, enrollment.id)

        response = await client.post(
            "/schedule/missed-sweep",
            json={"reference_date": "2025-01-09"},
            headers={"X-Admin-Token": "s3cret"},
        )
        assert response.status_code == 200
        assert response.json()["missed_count"] == 2
        assert response.json()["users_affected"] == 1

        api_app.dependency_overrides[get_reference_date] = lambda: date(2025, 1, 9)
        response = await client.post("/schedule/auto-reschedule", json={"strategy": "next_available"})
        assert response.status_code == 200
        data = response.json()
        assert data["total_rescheduled"] == 2
        assert data["strategy"] == "next_available"
        assert [r["new_date"] for r in data["rescheduled"]] == ["2025-01-20", "2025-01-22"]

        again = (await client.post("/schedule/auto-reschedule")).json()
        assert again["total_rescheduled"] == 0
        assert again["message"] == "No missed workouts to reschedule"

    @pytest.mark.asyncio
    async def test_sweep_with_chained_reschedule(self, client, enrollment, monkeypatch):
        monkeypatch.setattr(dependencies.settings, "admin_api_token", None)
        await generate(client, enrollment.id)

        response = await client.post(
            "/schedule/missed-sweep",
            json={"reference_date": "2025-01-09", "auto_reschedule": True, "strategy": "end_of_schedule"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "missed_count": 2,
            "users_affected": 1,
            "total_rescheduled": 2,
        }


class TestPlumbing:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"]["healthy"] is True

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client, enrollment):
        response = await client.get(
            f"/enrollments/{enrollment.id}/schedule", headers={"X-Request-ID": "trace-42"}
        )
        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_in_error_envelope(self, client):
        response = await client.get("/enrollments/777/schedule", headers={"X-Request-ID": "trace-43"})
        assert response.json()["meta"]["request_id"] == "trace-43"
