"""
Tests for visitor tracking, same-day dedup and the stats endpoints.
"""
from datetime import datetime, timedelta

from sqlalchemy import func, select

from jobboard.models.visitor import Visitor
from jobboard.services.visitors import (
    detect_device,
    parse_user_agent,
    period_start,
    resolve_period,
    track_visit,
    visitor_stats,
)

IPHONE = ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
          "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1")
WINDOWS_CHROME = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36")
IPAD = "Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X) AppleWebKit/605.1.15 Version/16.0 Safari/604.1"
ANDROID = ("Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
           "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36")


class TestUserAgent:

    def test_iphone(self):
        assert parse_user_agent(IPHONE) == ("mobile", "Mobile Safari", "iOS")

    def test_desktop_chrome(self):
        assert parse_user_agent(WINDOWS_CHROME) == ("desktop", "Chrome", "Windows")

    def test_tablet(self):
        assert parse_user_agent(IPAD)[0] == "tablet"

    def test_unknown(self):
        assert parse_user_agent("unknown") == ("desktop", "unknown", "unknown")

    def test_android_phone(self):
        assert detect_device(ANDROID) == "mobile"


class TestTrackVisit:

    def test_same_day_repeat_increments(self, session):
        now = datetime(2024, 5, 1, 9, 0)
        track_visit(session, "10.0.0.1", IPHONE, "/jobs", now=now)
        track_visit(session, "10.0.0.1", IPHONE, "/jobs", now=now + timedelta(hours=3))

        visits = session.scalars(select(Visitor)).all()
        assert len(visits) == 1
        assert visits[0].visit_count == 2
        assert visits[0].session_id == "10.0.0.1-2024-05-01"
        assert visits[0].visited_at == now + timedelta(hours=3)

    def test_new_day_is_a_new_record(self, session):
        now = datetime(2024, 5, 1, 23, 0)
        track_visit(session, "10.0.0.1", IPHONE, "/jobs", now=now)
        track_visit(session, "10.0.0.1", IPHONE, "/jobs", now=now + timedelta(hours=2))
        assert session.scalar(select(func.count()).select_from(Visitor)) == 2

    def test_referrer_defaults_to_direct(self, session):
        visit = track_visit(session, "10.0.0.2", WINDOWS_CHROME, "/")
        assert visit.referrer == "direct"
        assert visit.device == "desktop"


class TestVisitorApi:

    def test_track_dedups_per_ip_and_page(self, client, session):
        headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": IPHONE}
        for _ in range(2):
            assert client.post("/visitor/track", json={"page": "/jobs"}, headers=headers).get_json() == {"success": True}
        client.post("/visitor/track", json={"page": "/about", "referrer": "https://google.com"}, headers=headers)

        rows = {v.page: v for v in session.scalars(select(Visitor)).all()}
        assert set(rows) == {"/jobs", "/about"}
        assert rows["/jobs"].visit_count == 2
        assert rows["/jobs"].ip_address == "203.0.113.9"

    def test_track_requires_page(self, client):
        assert client.post("/visitor/track", json={}).status_code == 400

    def test_stats_and_recent(self, client, auth_headers):
        client.post("/visitor/track", json={"page": "/jobs", "referrer": "https://google.com"},
                    headers={"User-Agent": WINDOWS_CHROME})
        client.post("/visitor/track", json={"page": "/"}, headers={"User-Agent": IPHONE})

        stats = client.get("/visitor/stats?period=24h", headers=auth_headers).get_json()["stats"]
        assert stats["period"] == "24h"
        assert stats["total"] == 2
        assert stats["unique"] == 1
        assert {b["name"]: b["count"] for b in stats["byDevice"]} == {"desktop": 1, "mobile": 1}
        assert stats["topReferrers"] == [{"name": "https://google.com", "count": 1}]
        assert len(stats["byDay"]) == 1

        recent = client.get("/visitor/recent", headers=auth_headers).get_json()["visitors"]
        assert [v["page"] for v in recent] == ["/", "/jobs"]


class TestStatsPeriods:

    def test_unknown_period_is_seven_days(self):
        now = datetime(2024, 5, 10)
        assert period_start("bogus", now) == datetime(2024, 5, 3)
        assert period_start("all", now) == datetime(2020, 1, 1)

    def test_reported_period_is_the_applied_one(self, session):
        assert resolve_period("bogus") == "7d"
        assert resolve_period(None) == "7d"
        assert resolve_period("30d") == "30d"
        assert visitor_stats(session, "bogus")["period"] == "7d"
        assert visitor_stats(session, "all")["period"] == "all"

    def test_old_visits_outside_period(self, session):
        now = datetime(2024, 5, 10, 12)
        track_visit(session, "1.1.1.1", IPHONE, "/", now=now - timedelta(days=10))
        track_visit(session, "2.2.2.2", IPHONE, "/", now=now - timedelta(hours=1))

        assert visitor_stats(session, "7d", now=now)["total"] == 1
        assert visitor_stats(session, "all", now=now)["total"] == 2
