"""Dashboard figures and admin reports, computed straight from the database."""
import csv
import io
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Booking, Stadium, UserProfile


def _month_start(dt):
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def monthly_growth(now=None):
    """Percentage change in bookings created this month versus last month."""
    now = timezone.localtime(now)
    this_month = _month_start(now)
    last_month = _month_start(this_month - timedelta(days=1))
    current = Booking.objects.filter(created_at__gte=this_month).count()
    previous = Booking.objects.filter(created_at__gte=last_month, created_at__lt=this_month).count()
    if previous == 0:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def dashboard_stats(now=None):
    stadiums = Stadium.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    bookings = Booking.objects.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Booking.STATUS_PENDING)),
        revenue=Sum("total_price", filter=Q(status=Booking.STATUS_CONFIRMED)),
    )
    return {
        "total_stadiums": stadiums["total"],
        "active_stadiums": stadiums["active"],
        "inactive_stadiums": stadiums["total"] - stadiums["active"],
        "total_bookings": bookings["total"],
        "total_revenue": bookings["revenue"] or Decimal("0.00"),
        "active_users": UserProfile.objects.filter(status=UserProfile.STATUS_ACTIVE).count(),
        "pending_requests": bookings["pending"],
        "monthly_growth": monthly_growth(now),
    }


def recent_bookings(limit=5):
    return list(Booking.objects.select_related("stadium", "user").order_by("-created_at")[:limit])


# -------------------------
# Reports
# -------------------------
def monthly_revenue(months=6):
    rows = (
        Booking.objects.filter(status=Booking.STATUS_CONFIRMED)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(revenue=Sum("total_price"))
        .order_by("month")
    )
    data = [
        {"month": row["month"].strftime("%Y-%m"), "revenue": row["revenue"] or Decimal("0.00")}
        for row in rows
    ]
    return data[-months:] if months else data


def status_distribution():
    total = Booking.objects.count()
    if not total:
        return []
    rows = Booking.objects.values("status").annotate(count=Count("id")).order_by("status")
    return [
        {
            "status": row["status"].capitalize(),
            "count": row["count"],
            "percentage": round(row["count"] / total * 100),
        }
        for row in rows
    ]


def stadium_performance(limit=5):
    if not Stadium.objects.exists() or not Booking.objects.exists():
        return []
    rows = Stadium.objects.annotate(
        booking_count=Count("bookings"),
        revenue=Sum("bookings__total_price", filter=Q(bookings__status=Booking.STATUS_CONFIRMED)),
    )
    data = [
        {
            "name": stadium.name,
            "bookings": stadium.booking_count,
            "revenue": stadium.revenue or Decimal("0.00"),
            "rating": stadium.rating,
        }
        for stadium in rows
    ]
    data.sort(key=lambda row: row["revenue"], reverse=True)
    return data[:limit]


def weekly_trends(weeks=7, now=None):
    """
    Bookings created per 7-day bucket counting back from ``now``.
    ``Week 1`` is the oldest bucket, ``Week <weeks>`` the current one.
    """
    now = now or timezone.now()
    counts = {f"Week {i}": 0 for i in range(1, weeks + 1)}
    since = now - timedelta(days=7 * weeks)
    for created in Booking.objects.filter(created_at__gt=since, created_at__lte=now).values_list(
        "created_at", flat=True
    ):
        index = (now - created).days // 7
        if 0 <= index < weeks:
            counts[f"Week {weeks - index}"] += 1
    return [{"week": label, "bookings": count} for label, count in counts.items()]


def export_report_csv(now=None):
    buf = io.StringIO()
    writer = csv.writer(buf)
    stats = dashboard_stats(now)

    writer.writerow(["Summary"])
    writer.writerow(["Metric", "Value"])
    for key, value in stats.items():
        writer.writerow([key.replace("_", " ").title(), value])

    writer.writerow([])
    writer.writerow(["Monthly Revenue"])
    writer.writerow(["Month", "Revenue"])
    for row in monthly_revenue():
        writer.writerow([row["month"], row["revenue"]])

    writer.writerow([])
    writer.writerow(["Booking Status"])
    writer.writerow(["Status", "Count", "Percentage"])
    for row in status_distribution():
        writer.writerow([row["status"], row["count"], f"{row['percentage']}%"])

    writer.writerow([])
    writer.writerow(["Top Stadiums"])
    writer.writerow(["Stadium", "Bookings", "Revenue", "Rating"])
    for row in stadium_performance():
        writer.writerow([row["name"], row["bookings"], row["revenue"], row["rating"]])

    writer.writerow([])
    writer.writerow(["Weekly Bookings"])
    writer.writerow(["Week", "Bookings"])
    for row in weekly_trends(now=now):
        writer.writerow([row["week"], row["bookings"]])

    return buf.getvalue()
