# booking/admin_views.py
import logging

from django.contrib import messages
from django.contrib.auth.models import User
from django.db.models import Avg, Q
from django.http import HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from . import services, stats
from .decorators import admin_required
from .exceptions import BookingError
from .forms import AdminUserForm, StadiumForm
from .models import Booking, Stadium, UserProfile, get_profile

logger = logging.getLogger(__name__)


@admin_required
def dashboard(request):
    return render(request, "console/dashboard.html", {
        "stats": stats.dashboard_stats(),
        "recent_bookings": stats.recent_bookings(),
    })


# -------------------------
# Stadiums
# -------------------------
@admin_required
def stadiums(request):
    term = request.GET.get("q", "")
    qs = services.search_stadiums(term, sort=request.GET.get("sort", "name"), active_only=False)
    averages = Stadium.objects.aggregate(
        capacity=Avg("capacity"), price=Avg("price_per_hour"), rating=Avg("rating"),
    )
    return render(request, "console/stadiums.html", {
        "stadiums": qs,
        "q": term,
        "total": Stadium.objects.count(),
        "active": Stadium.objects.filter(is_active=True).count(),
        "avg_capacity": round(averages["capacity"] or 0),
        "avg_price": round(averages["price"] or 0),
        "avg_rating": round(averages["rating"] or 0, 1),
    })


@admin_required
def stadium_form(request, stadium_id=None):
    """Add a stadium, or edit one when ``stadium_id`` is given."""
    stadium = get_object_or_404(Stadium, id=stadium_id) if stadium_id else None

    if request.method == "POST":
        form = StadiumForm(request.POST, request.FILES, instance=stadium)
        if form.is_valid():
            saved = form.save()
            messages.success(request, f"Stadium {'updated' if stadium else 'added'} successfully.")
            logger.info("Stadium %s saved by %s", saved.pk, request.user.pk)
            return redirect("console-stadiums")
        messages.error(request, "Please correct the errors below.")
    else:
        form = StadiumForm(instance=stadium)

    return render(request, "console/stadium_form.html", {"form": form, "stadium": stadium})


@admin_required
@require_POST
def toggle_stadium(request, stadium_id):
    stadium = get_object_or_404(Stadium, id=stadium_id)
    if stadium.is_active:
        services.deactivate_stadium(stadium)
        messages.success(request, f"{stadium.name} deactivated.")
    else:
        services.activate_stadium(stadium)
        messages.success(request, f"{stadium.name} activated.")
    return redirect("console-stadiums")


@admin_required
@require_POST
def delete_stadium(request, stadium_id):
    stadium = get_object_or_404(Stadium, id=stadium_id)
    name = stadium.name
    services.delete_stadium(stadium)
    messages.success(request, f"{name} deleted.")
    return redirect("console-stadiums")


# -------------------------
# Bookings
# -------------------------
@admin_required
def bookings(request):
    term = request.GET.get("q", "").strip()
    status = request.GET.get("status", "all")

    all_bookings = Booking.objects.select_related("stadium", "user")
    qs = all_bookings
    if term:
        qs = qs.filter(
            Q(stadium__name__icontains=term)
            | Q(user__first_name__icontains=term)
            | Q(user__email__icontains=term)
        )
    if status != "all":
        qs = qs.filter(status=status)

    return render(request, "console/bookings.html", {
        "bookings": qs.order_by("-created_at"),
        "q": term,
        "status": status,
        "total": all_bookings.count(),
        "pending_count": all_bookings.filter(status=Booking.STATUS_PENDING).count(),
        "confirmed_count": all_bookings.filter(status=Booking.STATUS_CONFIRMED).count(),
        "cancelled_count": all_bookings.filter(status=Booking.STATUS_CANCELLED).count(),
        "status_choices": Booking.STATUS_CHOICES,
    })


@admin_required
@require_POST
def approve_booking(request, booking_id):
    booking = get_object_or_404(Booking, id=booking_id)
    try:
        services.approve_booking(booking)
    except BookingError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "The booking request has been approved successfully.")
    return redirect("console-bookings")


@admin_required
@require_POST
def reject_booking(request, booking_id):
    booking = get_object_or_404(Booking, id=booking_id)
    try:
        services.reject_booking(booking, request.POST.get("reason", ""))
    except BookingError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "The booking request has been rejected.")
    return redirect("console-bookings")


@admin_required
@require_POST
def delete_booking(request, booking_id):
    booking = get_object_or_404(Booking, id=booking_id)
    services.delete_booking(booking)
    messages.success(request, "Booking deleted.")
    return redirect("console-bookings")


# -------------------------
# Users
# -------------------------
@admin_required
def users(request):
    term = request.GET.get("q", "")
    status = request.GET.get("status", "all")
    role = request.GET.get("role", "all")
    profiles = UserProfile.objects.all()
    return render(request, "console/users.html", {
        "profiles": services.search_users(term, status, role),
        "q": term,
        "status": status,
        "role": role,
        "total": profiles.count(),
        "active_count": profiles.filter(status=UserProfile.STATUS_ACTIVE).count(),
        "suspended_count": profiles.filter(status=UserProfile.STATUS_SUSPENDED).count(),
        "admin_count": profiles.filter(role=UserProfile.ROLE_ADMIN).count(),
        "status_choices": UserProfile.STATUS_CHOICES,
        "role_choices": UserProfile.ROLE_CHOICES,
    })


@admin_required
@require_POST
def user_status(request, user_id):
    profile = get_profile(get_object_or_404(User, id=user_id))
    try:
        services.set_user_status(profile, request.POST.get("status", ""))
    except ValueError as exc:
        messages.error(request, str(exc))
    else:
        verb = "activated" if profile.status == UserProfile.STATUS_ACTIVE else profile.status
        messages.success(request, f"{profile.name} has been {verb}.")
    return redirect("console-users")


@admin_required
@require_POST
def user_role(request, user_id):
    profile = get_profile(get_object_or_404(User, id=user_id))
    try:
        services.set_user_role(profile, request.POST.get("role", ""))
    except ValueError as exc:
        messages.error(request, str(exc))
    else:
        label = "an admin" if profile.role == UserProfile.ROLE_ADMIN else "a regular user"
        messages.success(request, f"{profile.name} is now {label}.")
    return redirect("console-users")


@admin_required
def edit_user(request, user_id):
    user = get_object_or_404(User, id=user_id)
    profile = get_profile(user)

    if request.method == "POST":
        form = AdminUserForm(request.POST, instance=user, profile=profile)
        if form.is_valid():
            form.save()
            messages.success(request, f"{user.first_name or user.username} has been updated.")
            return redirect("console-users")
        messages.error(request, "Please correct the errors below.")
    else:
        form = AdminUserForm(instance=user, profile=profile)

    return render(request, "console/user_form.html", {"form": form, "edited": user})


@admin_required
@require_POST
def delete_user(request, user_id):
    user = get_object_or_404(User, id=user_id)
    if user == request.user:
        messages.error(request, "You cannot delete your own account.")
        return redirect("console-users")
    name = user.first_name or user.username
    user.delete()
    logger.info("User %s deleted by %s", user_id, request.user.pk)
    messages.success(request, f"{name} has been removed successfully.")
    return redirect("console-users")


# -------------------------
# Reports
# -------------------------
@admin_required
def reports(request):
    return render(request, "console/reports.html", {
        "stats": stats.dashboard_stats(),
        "monthly_revenue": stats.monthly_revenue(),
        "status_distribution": stats.status_distribution(),
        "stadium_performance": stats.stadium_performance(),
        "weekly_trends": stats.weekly_trends(),
    })


@admin_required
def reports_csv(request):
    response = HttpResponse(stats.export_report_csv(), content_type="text/csv")
    filename = f"kickbooking-report-{timezone.localdate():%Y-%m-%d}.csv"
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
