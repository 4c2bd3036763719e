"""Reminder schedules, next-time calculation and dispatch."""

import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from glowfit.core.config import utc_now
from glowfit.models import GlowReminder, Notification
from glowfit.models.enums import ReminderFrequency
from glowfit.services.reminder import advance_reminder, calculate_next_reminder

# 2024-01-01 is a Monday; 00:00 UTC is 08:00 in Shanghai
NOW = datetime(2024, 1, 1, 0, 0)
TZ = "Asia/Shanghai"


class TestCalculateNextReminder:
    @pytest.mark.parametrize(
        "frequency,interval,time_of_day,weekdays,expected",
        [
            # later today
            (ReminderFrequency.DAILY, 2, "09:00", None, datetime(2024, 1, 1, 1, 0)),
            # already passed today, so interval days later
            (ReminderFrequency.DAILY, 2, "07:00", None, datetime(2024, 1, 2, 23, 0)),
            (ReminderFrequency.WEEKLY, 1, "09:00", None, datetime(2024, 1, 8, 1, 0)),
            (ReminderFrequency.WEEKLY, 2, "07:30", None, datetime(2024, 1, 14, 23, 30)),
            # next Wednesday
            (ReminderFrequency.CUSTOM, 1, "07:00", [3, 5], datetime(2024, 1, 2, 23, 0)),
            # Monday has passed, so next Monday
            (ReminderFrequency.CUSTOM, 1, "07:00", [1], datetime(2024, 1, 7, 23, 0)),
            (ReminderFrequency.CUSTOM, 1, "09:00", [1], datetime(2024, 1, 1, 1, 0)),
            (ReminderFrequency.CUSTOM, 5, "09:00", None, datetime(2024, 1, 1, 1, 0)),
        ],
    )
    def test_schedule(self, frequency, interval, time_of_day, weekdays, expected):
        result = calculate_next_reminder(
            frequency, interval, time_of_day, weekdays, now=NOW, tz_name=TZ
        )
        assert result == expected

    def test_result_is_in_the_future(self):
        now = utc_now()
        for frequency in ReminderFrequency:
            assert calculate_next_reminder(frequency, 1, "12:00", [2, 6], now=now) > now

    @pytest.mark.parametrize("frequency", list(ReminderFrequency))
    def test_advance_is_monotonic(self, frequency):
        previous = datetime(2024, 1, 5, 1, 0)  # exactly 09:00 Shanghai
        reminder = SimpleNamespace(
            frequency=frequency, interval=1, time="09:00", weekdays=[5], next_reminder=previous
        )

        for now in (NOW, previous, previous + timedelta(days=3)):
            nxt = advance_reminder(reminder, now)
            assert nxt > now
            assert nxt > previous


@pytest.fixture
def plan(make_plan):
    return make_plan()


class TestReminderEndpoints:
    def test_create_computes_next_reminder(self, client, auth_headers, plan):
        response = client.post(
            "/api/glow-reminders",
            json={"planId": plan["id"], "frequency": "DAILY", "interval": 1, "time": "21:30"},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert response.status_code == 201
        assert data["planId"] == plan["id"]
        assert data["plan"]["name"] == plan["name"]
        assert data["isActive"] is True
        assert datetime.fromisoformat(data["nextReminder"]) > utc_now()

    @pytest.mark.parametrize("time_of_day", ["24:00", "9:60", "noon", ""])
    def test_invalid_time(self, client, auth_headers, plan, time_of_day):
        response = client.post(
            "/api/glow-reminders",
            json={"planId": plan["id"], "frequency": "DAILY", "time": time_of_day},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_invalid_weekday(self, client, auth_headers, plan):
        response = client.post(
            "/api/glow-reminders",
            json={"planId": plan["id"], "frequency": "CUSTOM", "time": "08:00", "weekdays": [0, 8]},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_foreign_plan(self, client, other_headers, plan):
        response = client.post(
            "/api/glow-reminders",
            json={"planId": plan["id"], "frequency": "DAILY", "time": "08:00"},
            headers=other_headers,
        )
        assert response.status_code == 404

    def test_update_recomputes_schedule(self, client, auth_headers, db_session, plan):
        created = client.post(
            "/api/glow-reminders",
            json={"planId": plan["id"], "frequency": "DAILY", "time": "08:00"},
            headers=auth_headers,
        ).json()["data"]
        url = f"/api/glow-reminders/{created['id']}"

        reminder = db_session.get(GlowReminder, uuid.UUID(created["id"]))
        reminder.next_reminder = datetime(2000, 1, 1)
        db_session.commit()

        toggled = client.put(url, json={"isActive": False}, headers=auth_headers).json()["data"]
        assert toggled["isActive"] is False
        assert toggled["nextReminder"].startswith("2000-01-01")

        rescheduled = client.put(
            url, json={"frequency": "CUSTOM", "weekdays": [6, 6, 2]}, headers=auth_headers
        ).json()["data"]
        assert rescheduled["weekdays"] == [2, 6]
        assert datetime.fromisoformat(rescheduled["nextReminder"]) > utc_now()

    def test_plan_detail_lists_active_reminders(self, client, auth_headers, plan):
        for time_of_day in ("08:00", "20:00"):
            client.post(
                "/api/glow-reminders",
                json={"planId": plan["id"], "frequency": "DAILY", "time": time_of_day},
                headers=auth_headers,
            )
        listed = client.get(f"/api/glow-reminders?planId={plan['id']}", headers=auth_headers).json()["data"]
        client.put(f"/api/glow-reminders/{listed['items'][0]['id']}", json={"isActive": False}, headers=auth_headers)

        detail = client.get(f"/api/glow-plans/{plan['id']}", headers=auth_headers).json()["data"]
        assert detail["reminderCount"] == 2
        assert len(detail["reminders"]) == 1

    def test_fitness_reminder_crud(self, client, auth_headers, other_headers, make_item):
        item = make_item()
        created = client.post(
            "/api/fitness-reminders",
            json={"itemId": item["id"], "frequency": "WEEKLY", "interval": 2, "time": "18:00"},
            headers=auth_headers,
        )
        assert created.status_code == 201
        url = f"/api/fitness-reminders/{created.json()['data']['id']}"

        assert client.get(url, headers=other_headers).status_code == 404
        assert client.get(url, headers=auth_headers).json()["data"]["item"]["id"] == item["id"]
        assert client.delete(url, headers=auth_headers).status_code == 200
        assert client.get(url, headers=auth_headers).status_code == 404


class TestDispatch:
    def _due_reminder(self, client, headers, db_session, plan_id, minutes_ago=5):
        created = client.post(
            "/api/glow-reminders",
            json={"planId": plan_id, "frequency": "DAILY", "time": "08:00"},
            headers=headers,
        ).json()["data"]
        reminder = db_session.query(GlowReminder).filter_by(plan_id=uuid.UUID(plan_id)).one()
        reminder.next_reminder = utc_now() - timedelta(minutes=minutes_ago)
        db_session.commit()
        return reminder, created

    def test_dispatch_creates_notification_and_advances(
        self, client, auth_headers, admin_headers, db_session, plan
    ):
        reminder, _ = self._due_reminder(client, auth_headers, db_session, plan["id"])
        previous = reminder.next_reminder

        response = client.post("/api/admin/reminders/dispatch", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"dispatched": 1, "glow": 1, "fitness": 0}
        notification = db_session.query(Notification).one()
        assert notification.type.value == "GLOW_REMINDER"
        assert str(notification.related_id) == plan["id"]

        db_session.refresh(reminder)
        assert reminder.next_reminder > previous
        assert reminder.next_reminder > utc_now()

        again = client.post("/api/admin/reminders/dispatch", headers=admin_headers)
        assert again.json()["data"]["dispatched"] == 0

    def test_paused_plan_is_not_notified(self, client, auth_headers, admin_headers, db_session, plan):
        reminder, _ = self._due_reminder(client, auth_headers, db_session, plan["id"])
        client.put(f"/api/glow-plans/{plan['id']}", json={"status": "PAUSED"}, headers=auth_headers)

        response = client.post("/api/admin/reminders/dispatch", headers=admin_headers)

        assert response.json()["data"]["dispatched"] == 0
        db_session.refresh(reminder)
        assert reminder.next_reminder > utc_now()

    def test_dispatch_requires_admin(self, client, auth_headers):
        response = client.post("/api/admin/reminders/dispatch", headers=auth_headers)
        assert response.status_code == 403


class TestCleanup:
    def test_removes_old_read_notifications(self, client, auth_headers, admin_headers, db_session):
        for title in ("old-read", "old-unread", "new-read"):
            client.post(
                "/api/notifications",
                json={"type": "SYSTEM", "title": title, "content": "内容"},
                headers=auth_headers,
            )
        rows = {n.title: n for n in db_session.query(Notification).all()}
        rows["old-read"].is_read = True
        rows["old-read"].created_at = utc_now() - timedelta(days=31)
        rows["old-unread"].created_at = utc_now() - timedelta(days=31)
        rows["new-read"].is_read = True
        db_session.commit()

        response = client.post("/api/admin/notifications/cleanup", headers=admin_headers)

        assert response.json()["data"]["deleted"] == 1
        assert {n.title for n in db_session.query(Notification).all()} == {"old-unread", "new-read"}
