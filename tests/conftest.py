from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User

from booking import services
from booking.models import Stadium, UserProfile


@pytest.fixture
def player(db):
    user = User.objects.create_user(
        username="kofi", email="kofi@example.com", password="pass12345", first_name="Kofi Mensah"
    )
    user.profile.phone = "0244000000"
    user.profile.save()
    return user


@pytest.fixture
def other_player(db):
    return User.objects.create_user(
        username="ama", email="ama@example.com", password="pass12345", first_name="Ama Owusu"
    )


@pytest.fixture
def console_admin(db):
    user = User.objects.create_user(
        username="admin", email="admin@example.com", password="pass12345", first_name="Site Admin"
    )
    user.profile.role = UserProfile.ROLE_ADMIN
    user.profile.save()
    return user


@pytest.fixture
def stadium(db):
    return Stadium.objects.create(
        name="Accra Sports Stadium",
        location="Accra",
        capacity=40000,
        price_per_hour=Decimal("150.00"),
        rating=Decimal("4.5"),
        amenities="Parking, Floodlights , ,Changing rooms",
    )


@pytest.fixture
def small_pitch(db):
    return Stadium.objects.create(
        name="Baba Yara Annex",
        location="Kumasi",
        capacity=500,
        price_per_hour=Decimal("80.00"),
        rating=Decimal("3.9"),
    )


@pytest.fixture
def match_day():
    return date.today() + timedelta(days=3)


@pytest.fixture
def make_booking(match_day):
    def _make(user, stadium, start=time(10, 0), end=time(12, 0), day=None, **kwargs):
        return services.create_booking(user, stadium, day or match_day, start, end, **kwargs)

    return _make


@pytest.fixture
def player_client(client, player):
    client.force_login(player)
    return client


@pytest.fixture
def console_client(client, console_admin):
    client.force_login(console_admin)
    return client
