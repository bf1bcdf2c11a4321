import csv
import io
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from booking import services, stats
from booking.models import Booking, UserProfile


@pytest.fixture
def busy_week(player, other_player, stadium, small_pitch, make_booking):
    confirmed = services.approve_booking(make_booking(player, stadium))
    services.approve_booking(make_booking(other_player, small_pitch, start=time(18, 0), end=time(19, 30)))
    make_booking(other_player, stadium, start=time(14, 0), end=time(15, 0))
    rejected = make_booking(player, small_pitch, start=time(8, 0), end=time(9, 0))
    services.reject_booking(rejected, "Closed")
    return confirmed


@pytest.mark.django_db
def test_dashboard_stats_on_empty_database():
    figures = stats.dashboard_stats()
    assert figures["total_stadiums"] == 0
    assert figures["total_bookings"] == 0
    assert figures["total_revenue"] == Decimal("0.00")
    assert figures["monthly_growth"] == 0.0


def test_dashboard_stats(busy_week, small_pitch, other_player):
    services.deactivate_stadium(small_pitch)
    services.set_user_status(other_player.profile, UserProfile.STATUS_SUSPENDED)

    figures = stats.dashboard_stats()
    assert figures["total_stadiums"] == 2
    assert figures["active_stadiums"] == 1
    assert figures["inactive_stadiums"] == 1
    assert figures["total_bookings"] == 4
    # 2h at 150 + 1.5h at 80
    assert figures["total_revenue"] == Decimal("420.00")
    assert figures["active_users"] == 1
    assert figures["pending_requests"] == 1
    assert figures["monthly_growth"] == 100.0


def test_monthly_growth_compares_with_previous_month(busy_week):
    now = timezone.now()
    first_of_month = timezone.localtime(now).replace(day=1, hour=12)
    last_month = first_of_month - timedelta(days=5)
    ids = list(Booking.objects.values_list("pk", flat=True)[:2])
    Booking.objects.filter(pk__in=ids).update(created_at=last_month)
    # two this month against two last month
    assert stats.monthly_growth(now) == 0.0


def test_recent_bookings_newest_first(busy_week):
    recent = stats.recent_bookings(limit=2)
    assert len(recent) == 2
    assert recent[0].created_at >= recent[1].created_at


def test_monthly_revenue_groups_confirmed_by_month(busy_week):
    earlier = timezone.now() - timedelta(days=70)
    Booking.objects.filter(pk=busy_week.pk).update(created_at=earlier)

    rows = stats.monthly_revenue()
    assert [row["month"] for row in rows] == sorted(row["month"] for row in rows)
    assert sum(row["revenue"] for row in rows) == Decimal("420.00")
    assert rows[0]["month"] == timezone.localtime(earlier).strftime("%Y-%m")
    assert rows[0]["revenue"] == Decimal("300.00")


def test_status_distribution(busy_week):
    rows = {row["status"]: row for row in stats.status_distribution()}
    assert rows["Confirmed"]["count"] == 2
    assert rows["Confirmed"]["percentage"] == 50
    assert rows["Pending"]["percentage"] == 25
    assert rows["Cancelled"]["count"] == 1


@pytest.mark.django_db
def test_status_distribution_empty():
    assert stats.status_distribution() == []


def test_stadium_performance_sorted_by_revenue(busy_week):
    rows = stats.stadium_performance()
    assert [row["name"] for row in rows] == ["Accra Sports Stadium", "Baba Yara Annex"]
    assert rows[0]["bookings"] == 2
    assert rows[0]["revenue"] == Decimal("300.00")
    assert rows[1]["revenue"] == Decimal("120.00")


def test_stadium_performance_needs_bookings(stadium):
    assert stats.stadium_performance() == []


def test_weekly_trends_buckets(busy_week):
    now = timezone.now()
    Booking.objects.filter(pk=busy_week.pk).update(created_at=now - timedelta(days=15))
    rows = stats.weekly_trends(now=now)
    assert [row["week"] for row in rows] == [f"Week {i}" for i in range(1, 8)]
    counts = {row["week"]: row["bookings"] for row in rows}
    assert counts["Week 7"] == 3
    assert counts["Week 5"] == 1
    assert sum(counts.values()) == 4


def test_export_report_csv(busy_week):
    rows = list(csv.reader(io.StringIO(stats.export_report_csv())))
    assert rows[0] == ["Summary"]
    assert ["Total Revenue", "420.00"] in rows
    assert ["Confirmed", "2", "50%"] in rows
    assert ["Top Stadiums"] in rows
    assert ["Weekly Bookings"] in rows
