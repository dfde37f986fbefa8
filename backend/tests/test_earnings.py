from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from careernest.utils.dates import month_windows, utcnow

NOW = datetime(2026, 10, 17, 12, 0)
THIS_MONTH = datetime(2026, 10, 5, 10, 0)
LAST_MONTH = datetime(2026, 9, 20, 10, 0)


def test_total_earnings_is_zero_without_paid_sessions(service, mentor):
    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.total_earnings == Decimal("0")
    assert stats.pending_payments == Decimal("0")
    assert stats.completed_sessions == 0
    assert stats.monthly_growth == 0


def test_total_earnings_sums_only_paid_sessions(service, mentor, make_session):
    make_session(rate="100.00", payment_status="paid", scheduled_at=THIS_MONTH)
    make_session(rate="250.50", payment_status="paid", scheduled_at=datetime(2025, 3, 1))
    make_session(rate="400.00", payment_status="pending")
    make_session(rate="75.00", payment_status="failed")
    make_session(rate="60.00", status="scheduled", payment_status="pending")

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.total_earnings == Decimal("350.50")


def test_pending_payments_require_completed_status(service, mentor, make_session):
    make_session(rate="500.00", status="completed", payment_status="pending", scheduled_at=THIS_MONTH)
    make_session(rate="120.00", status="scheduled", payment_status="pending", scheduled_at=THIS_MONTH)
    make_session(rate="80.00", status="cancelled", payment_status="pending", scheduled_at=THIS_MONTH)

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.pending_payments == Decimal("500.00")


def test_other_mentors_sessions_are_ignored(db, service, mentor, mentee, make_session):
    from careernest.models import User

    other = User(username="lerato", phone="27820000009", role="mentor")
    db.add(other)
    db.commit()
    make_session(rate="900.00", payment_status="paid", mentor_id=other.id, scheduled_at=THIS_MONTH)

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.total_earnings == Decimal("0")


def test_dashboard_scenario(service, mentor, make_session):
    make_session(rate="500.00", status="completed", payment_status="pending", scheduled_at=THIS_MONTH)
    make_session(rate="300.00", status="completed", payment_status="paid", scheduled_at=LAST_MONTH)

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.pending_payments == Decimal("500.00")
    assert stats.total_earnings == Decimal("300.00")
    assert stats.completed_sessions == 1
    assert stats.monthly_growth == -100.0


def test_growth_is_zero_without_previous_month_earnings(service, mentor, make_session):
    make_session(rate="700.00", payment_status="paid", scheduled_at=THIS_MONTH)

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.monthly_growth == 0


def test_growth_is_rounded_to_two_places(service, mentor, make_session):
    make_session(rate="300.00", payment_status="paid", scheduled_at=LAST_MONTH)
    make_session(rate="400.00", payment_status="paid", scheduled_at=THIS_MONTH)

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.monthly_growth == 33.33


def test_month_windows_are_half_open(service, mentor, make_session):
    windows = month_windows(NOW)
    # First instant of this month counts, first instant of next month does not
    make_session(rate="100.00", payment_status="paid", scheduled_at=windows.current_start)
    make_session(rate="100.00", payment_status="paid", scheduled_at=windows.next_start)
    # Last moment of the previous month belongs to the previous month
    make_session(rate="50.00", payment_status="paid", scheduled_at=windows.current_start - timedelta(seconds=1))
    make_session(rate="50.00", payment_status="paid", scheduled_at=windows.previous_start)
    # Two months back is outside both windows
    make_session(rate="999.00", payment_status="paid", scheduled_at=windows.previous_start - timedelta(days=1))

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.completed_sessions == 1
    # current = 100, previous = 100
    assert stats.monthly_growth == 0.0


def test_completed_sessions_counts_this_month_only(service, mentor, make_session):
    make_session(status="completed", scheduled_at=datetime(2026, 10, 1, 0, 0))
    make_session(status="completed", scheduled_at=datetime(2026, 10, 31, 23, 59))
    make_session(status="completed", scheduled_at=LAST_MONTH)
    make_session(status="scheduled", scheduled_at=THIS_MONTH)
    make_session(status="completed", scheduled_at=datetime(2026, 11, 1, 0, 0))

    stats = service.get_earnings_stats(mentor.id, now=NOW)

    assert stats.completed_sessions == 2


def test_month_windows_roll_over_year_boundaries():
    january = month_windows(datetime(2027, 1, 15, 8, 30))
    assert january.previous_start == datetime(2026, 12, 1)
    assert january.current_start == datetime(2027, 1, 1)
    assert january.next_start == datetime(2027, 2, 1)

    december = month_windows(datetime(2026, 12, 31, 23, 59))
    assert december.previous_start == datetime(2026, 11, 1)
    assert december.next_start == datetime(2027, 1, 1)


def test_earnings_endpoint_uses_camel_case(client, mentor, make_session):
    make_session(rate="500.00", status="completed", payment_status="pending")

    r = client.get("/api/mentor/earnings", headers={"mentor-id": str(mentor.id)})

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["pendingPayments"] == 500.0
    assert body["totalEarnings"] == 0.0
    assert set(body) == {"totalEarnings", "pendingPayments", "completedSessions", "monthlyGrowth"}


def test_utcnow_is_naive_utc():
    now = utcnow()

    assert now.tzinfo is None
    assert abs(now - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(seconds=5)
