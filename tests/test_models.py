from datetime import date, datetime, time
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth.models import User
from django.test import override_settings
from django.utils import timezone

from booking import models
from booking.models import Booking, UserProfile, get_profile, hours_between


def test_hours_between_handles_partial_hours():
    assert hours_between(time(9, 0), time(10, 30)) == Decimal("1.50")
    assert hours_between(time(18, 15), time(19, 0)) == Decimal("0.75")


def test_hours_between_is_zero_when_end_not_after_start():
    assert hours_between(time(10, 0), time(10, 0)) == Decimal("0.00")
    assert hours_between(time(12, 0), time(9, 0)) == Decimal("0.00")


def test_quote_uses_hourly_price(stadium):
    duration, total = stadium.quote(time(10, 0), time(11, 30))
    assert duration == Decimal("1.50")
    assert total == Decimal("225.00")


def test_amenity_list_drops_blanks(stadium):
    assert stadium.amenity_list == ["Parking", "Floodlights", "Changing rooms"]


@override_settings(DEFAULT_STADIUM_IMAGE="/placeholder.jpg")
def test_image_src_falls_back_to_default(stadium):
    assert stadium.image_src == "/placeholder.jpg"
    stadium.image_url = "https://cdn.example.com/accra.jpg"
    assert stadium.image_src == "https://cdn.example.com/accra.jpg"


def test_status_and_availability_follow_is_active(stadium):
    assert stadium.status == "active"
    assert stadium.availability == "Available"
    stadium.is_active = False
    assert stadium.status == "inactive"
    assert stadium.availability == "Inactive"


@pytest.mark.django_db
def test_availability_booked_during_confirmed_slot(stadium, player, monkeypatch):
    now = timezone.make_aware(datetime.combine(date(2030, 6, 1), time(12, 30)))
    monkeypatch.setattr(models, "timezone", SimpleNamespace(localtime=lambda: now))
    Booking.objects.create(
        user=player,
        stadium=stadium,
        date=now.date(),
        start_time=time(now.hour - 1, 0),
        end_time=time(now.hour + 1, 0),
        duration=Decimal("2.00"),
        total_price=Decimal("300.00"),
        status=Booking.STATUS_CONFIRMED,
    )
    assert stadium.availability == "Booked"

    after = now.replace(hour=13)
    monkeypatch.setattr(models, "timezone", SimpleNamespace(localtime=lambda: after))
    assert stadium.availability == "Available"


@pytest.mark.django_db
def test_profile_created_for_new_user():
    user = User.objects.create_user(username="yaw", password="pass12345")
    assert user.profile.role == UserProfile.ROLE_USER
    assert user.profile.status == UserProfile.STATUS_ACTIVE
    assert user.profile.can_login


@pytest.mark.django_db
def test_get_profile_recreates_missing_profile(player):
    UserProfile.objects.filter(user=player).delete()
    player = User.objects.get(pk=player.pk)
    assert get_profile(player).role == UserProfile.ROLE_USER


def test_is_admin_by_role_or_staff(player, console_admin):
    assert console_admin.profile.is_admin
    assert not player.profile.is_admin
    player.is_staff = True
    assert player.profile.is_admin


def test_total_spent_counts_confirmed_only(player, stadium, make_booking):
    first = make_booking(player, stadium, start=time(8, 0), end=time(9, 0))
    make_booking(player, stadium, start=time(10, 0), end=time(12, 0))
    Booking.objects.filter(pk=first.pk).update(status=Booking.STATUS_CONFIRMED)
    assert player.profile.total_bookings == 2
    assert player.profile.total_spent == Decimal("150.00")


def test_booking_serialisation(player, stadium, make_booking):
    booking = make_booking(player, stadium, transaction_name="Kofi", transaction_number="MM-1")
    data = booking.to_dict()
    assert data["id"] == booking.pk
    assert data["start_time"] == "10:00"
    assert data["end_time"] == "12:00"
    assert data["total_price"] == "300.00"
    assert data["status"] == "pending"
    assert data["stadium_name"] == "Accra Sports Stadium"
    assert data["user_name"] == "Kofi Mensah"
    assert booking.time_slot == "10:00-12:00"
