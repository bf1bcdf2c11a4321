# booking/views.py
from datetime import datetime

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.shortcuts import render, redirect, get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_POST

from . import services, stats
from .exceptions import BookingError
from .forms import BookingForm, ContactForm, ProfileEditForm
from .models import Booking, Stadium, UserProfile, get_profile


# -------------------------
# Public pages
# -------------------------
def home(request):
    featured = Stadium.objects.filter(is_active=True).order_by("-rating", "name")[:3]
    headline = stats.dashboard_stats()
    return render(request, "home.html", {"featured": featured, "stats": headline})


def about(request):
    return render(request, "about.html")


def services_page(request):
    return render(request, "services.html")


def contact(request):
    if request.method == "POST":
        form = ContactForm(request.POST)
        if form.is_valid():
            form.save()
            messages.success(request, "Message sent. We'll get back to you within 24 hours.")
            return redirect("contact")
        messages.error(request, "Please correct the errors below.")
    else:
        form = ContactForm()
    return render(request, "contact.html", {"form": form})


def stadium_list(request):
    """
    Public stadium browser: active stadiums only, searchable by name or
    location, with a location filter and sort order.
    """
    term = request.GET.get("q", "")
    location = request.GET.get("location", "all")
    sort = request.GET.get("sort", "name")
    stadiums = services.search_stadiums(term, location, sort)
    return render(request, "stadiums.html", {
        "stadiums": stadiums,
        "locations": services.locations(),
        "q": term,
        "selected_location": location,
        "sort": sort,
    })


# -------------------------
# Authentication
# -------------------------
def _dashboard_for(user):
    return "admin-dashboard" if get_profile(user).is_admin else "user-dashboard"


def login_page(request):
    if request.method == "POST":
        identifier = (request.POST.get("username") or request.POST.get("email") or "").strip()
        password = request.POST.get("password")

        username = identifier
        if "@" in identifier:
            match = User.objects.filter(email__iexact=identifier).first()
            if match:
                username = match.username

        user = authenticate(request, username=username, password=password)
        if user:
            profile = get_profile(user)
            if not profile.can_login:
                messages.error(request, f"Your account is {profile.status}. Contact support.")
                return render(request, "login.html")
            login(request, user)
            return redirect(_dashboard_for(user))
        messages.error(request, "Invalid email or password")
    return render(request, "login.html")


def logout_view(request):
    logout(request)
    return redirect("home")


def register_page(request):
    if request.method == "POST":
        full_name = request.POST.get("full_name", "").strip()
        email = request.POST.get("email", "").strip()
        phone = request.POST.get("phone", "").strip()
        address = request.POST.get("address", "").strip()
        password = request.POST.get("password")
        confirm_password = request.POST.get("confirm_password")

        if not (full_name and email and password):
            messages.error(request, "Name, email and password are required.")
            return render(request, "register.html")

        if password != confirm_password:
            messages.error(request, "Passwords do not match.")
            return render(request, "register.html")

        if User.objects.filter(email__iexact=email).exists():
            messages.error(request, "Email already registered.")
            return render(request, "register.html")

        username = email.split("@")[0]
        # ensure username unique
        base = username
        i = 1
        while User.objects.filter(username=username).exists():
            username = f"{base}{i}"
            i += 1

        user = User.objects.create_user(username=username, email=email, password=password, first_name=full_name)
        profile = get_profile(user)
        profile.phone = phone
        profile.address = address
        profile.save()

        login(request, user)
        return redirect("user-dashboard")

    return render(request, "register.html")


# -------------------------
# User area
# -------------------------
@login_required(login_url="login")
def user_dashboard(request):
    summary = services.user_booking_summary(request.user)
    available = [s for s in Stadium.objects.filter(is_active=True) if s.availability == "Available"]
    return render(request, "user_dashboard.html", {
        "summary": summary,
        "recent_bookings": summary["bookings"][:5],
        "available_stadiums": available,
    })


@login_required(login_url="login")
def book_stadium(request):
    term = request.GET.get("q", "")
    sort = request.GET.get("sort", "name")
    availability = request.GET.get("availability", "all")

    stadiums = list(services.search_stadiums(term, "all", sort))
    active_count = Stadium.objects.filter(is_active=True).count()
    if availability != "all":
        stadiums = [s for s in stadiums if s.availability.lower() == availability]

    return render(request, "book_stadium.html", {
        "stadiums": stadiums,
        "active_count": active_count,
        "q": term,
        "sort": sort,
        "availability": availability,
    })


def _parse_time(value):
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        return None


@login_required(login_url="login")
def stadium_booking(request, stadium_id):
    """
    Booking form for one stadium. GET shows the form (with a price quote when
    start and end are given), POST records a pending booking request.
    """
    stadium = get_object_or_404(Stadium, id=stadium_id, is_active=True)

    if request.method == "POST":
        form = BookingForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            try:
                booking = services.create_booking(
                    user=request.user,
                    stadium=stadium,
                    date=data["date"],
                    start_time=data["start_time"],
                    end_time=data["end_time"],
                    notes=data["notes"],
                    transaction_name=data["transaction_name"],
                    transaction_number=data["transaction_number"],
                )
            except BookingError as exc:
                messages.error(request, str(exc))
            else:
                messages.success(request, "Your booking request has been submitted and is pending approval.")
                return redirect(reverse("booking-confirmation") + f"?id={booking.id}")
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        form = BookingForm(initial={
            "date": request.GET.get("date"),
            "start_time": request.GET.get("start"),
            "end_time": request.GET.get("end"),
        })

    start = _parse_time(request.POST.get("start_time") or request.GET.get("start"))
    end = _parse_time(request.POST.get("end_time") or request.GET.get("end"))
    duration, total = stadium.quote(start, end) if start and end else (0, 0)

    return render(request, "stadium_booking.html", {
        "stadium": stadium,
        "form": form,
        "duration": duration,
        "total": total,
    })


@login_required(login_url="login")
def booking_confirmation(request):
    booking_id = request.GET.get("id")
    booking = None
    if booking_id and booking_id.isdigit():
        booking = Booking.objects.filter(id=booking_id, user=request.user).select_related("stadium").first()
    return render(request, "booking_success.html", {"booking": booking})


@login_required(login_url="login")
def my_bookings(request):
    summary = services.user_booking_summary(request.user)
    return render(request, "my_bookings.html", {"summary": summary, "bookings": summary["bookings"]})


@login_required(login_url="login")
@require_POST
def cancel_booking(request, booking_id):
    booking = get_object_or_404(Booking, id=booking_id, user=request.user)
    try:
        services.cancel_booking(request.user, booking)
    except BookingError as exc:
        messages.error(request, str(exc))
    else:
        messages.success(request, "Booking cancelled.")
    return redirect("my-bookings")


# -------------------------
# Profile
# -------------------------
@login_required(login_url="login")
def edit_profile(request):
    user = request.user
    profile = get_profile(user)

    if request.method == "POST":
        form = ProfileEditForm(request.POST, instance=user, profile=profile)
        if form.is_valid():
            form.save()
            messages.success(request, "Profile updated.")
            return redirect("edit-profile")
        messages.error(request, "Please correct the errors.")
    else:
        form = ProfileEditForm(instance=user, profile=profile)

    return render(request, "edit_profile.html", {
        "form": form,
        "profile": profile,
        "member_since": profile.created_at,
        "is_admin": profile.role == UserProfile.ROLE_ADMIN,
    })
