import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from .exceptions import (
    BookingConflict, BookingError, DuplicateTransaction, InvalidTransition, StadiumUnavailable,
)
from .models import Booking, Stadium, UserProfile

logger = logging.getLogger(__name__)

STADIUM_SORTS = {
    "name": ("name",),
    "location": ("location", "name"),
    "price-low": ("price_per_hour", "name"),
    "price": ("price_per_hour", "name"),
    "price-high": ("-price_per_hour", "name"),
    "capacity": ("-capacity", "name"),
    "rating": ("-rating", "name"),
}


# -------------------------
# Stadiums
# -------------------------
def search_stadiums(term="", location="all", sort="name", active_only=True):
    """
    Stadium browser query: text search over name and location, optional exact
    location filter, and one of the STADIUM_SORTS orderings.
    """
    qs = Stadium.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    term = (term or "").strip()
    if term:
        qs = qs.filter(name__icontains=term) | qs.filter(location__icontains=term)
    if location and location != "all":
        qs = qs.filter(location=location)
    return qs.order_by(*STADIUM_SORTS.get(sort, STADIUM_SORTS["name"]))


def locations():
    return sorted(set(Stadium.objects.values_list("location", flat=True)))


def set_stadium_active(stadium, active):
    stadium.is_active = active
    stadium.save(update_fields=["is_active"])
    logger.info("Stadium %s %s", stadium.pk, "activated" if active else "deactivated")
    return stadium


def activate_stadium(stadium):
    return set_stadium_active(stadium, True)


def deactivate_stadium(stadium):
    return set_stadium_active(stadium, False)


def delete_stadium(stadium):
    # bookings go with it (FK cascade)
    removed = stadium.bookings.count()
    stadium_id = stadium.pk
    stadium.delete()
    logger.info("Stadium %s deleted with %s booking(s)", stadium_id, removed)


# -------------------------
# Bookings
# -------------------------
def _lock_stadium(stadium_id):
    return Stadium.objects.select_for_update().get(pk=stadium_id)


def _check_overlap(stadium, date, start_time, end_time, statuses, exclude_id=None):
    clash = Booking.objects.overlapping(stadium, date, start_time, end_time).filter(status__in=statuses)
    if exclude_id is not None:
        clash = clash.exclude(pk=exclude_id)
    clash = clash.first()
    if clash is not None:
        raise BookingConflict(
            f"{stadium.name} is already booked on {date} from {clash.time_slot}."
        )


def create_booking(user, stadium, date, start_time, end_time, notes="",
                   transaction_name="", transaction_number=""):
    """
    Record a pending booking request. Price and duration are computed here,
    never taken from the client. The stadium row is locked for the duration of
    the overlap check so two requests for the same stadium cannot both pass it.
    """
    if end_time <= start_time:
        raise BookingError("End time must be after start time.")
    transaction_number = (transaction_number or "").strip()

    with transaction.atomic():
        stadium = _lock_stadium(stadium.pk)
        if not stadium.is_active:
            raise StadiumUnavailable(f"{stadium.name} is not accepting bookings.")
        if transaction_number and Booking.objects.filter(transaction_number=transaction_number).exists():
            raise DuplicateTransaction(f"Transaction {transaction_number} has already been used.")

        _check_overlap(
            stadium, date, start_time, end_time,
            statuses=[Booking.STATUS_PENDING, Booking.STATUS_CONFIRMED],
        )

        duration, total = stadium.quote(start_time, end_time)
        try:
            # a booking at another stadium holds a different lock
            with transaction.atomic():
                booking = Booking.objects.create(
                    user=user,
                    stadium=stadium,
                    date=date,
                    start_time=start_time,
                    end_time=end_time,
                    duration=duration,
                    total_price=total,
                    notes=notes or "",
                    transaction_name=transaction_name or "",
                    transaction_number=transaction_number,
                )
        except IntegrityError as exc:
            if not transaction_number:
                raise
            raise DuplicateTransaction(f"Transaction {transaction_number} has already been used.") from exc

    logger.info(
        "Booking %s created: stadium=%s user=%s %s %s total=%s",
        booking.pk, stadium.pk, user.pk, date, booking.time_slot, total,
    )
    return booking


def _require_pending(booking, action):
    if booking.status != Booking.STATUS_PENDING:
        raise InvalidTransition(f"Cannot {action} a {booking.status} booking.")


def approve_booking(booking):
    with transaction.atomic():
        stadium = _lock_stadium(booking.stadium_id)
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        _require_pending(booking, "approve")
        _check_overlap(
            stadium, booking.date, booking.start_time, booking.end_time,
            statuses=[Booking.STATUS_CONFIRMED],
            exclude_id=booking.pk,
        )
        booking.status = Booking.STATUS_CONFIRMED
        booking.approved_at = timezone.now()
        booking.save(update_fields=["status", "approved_at"])
    logger.info("Booking %s approved", booking.pk)
    return booking


def reject_booking(booking, reason=""):
    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        _require_pending(booking, "reject")
        booking.status = Booking.STATUS_CANCELLED
        booking.rejection_reason = (reason or "").strip()
        booking.cancelled_at = timezone.now()
        booking.save(update_fields=["status", "rejection_reason", "cancelled_at"])
    logger.info("Booking %s rejected: %s", booking.pk, booking.rejection_reason or "no reason given")
    return booking


def cancel_booking(user, booking):
    """Owner cancellation of a booking that has not been decided yet."""
    if booking.user_id != user.pk:
        raise InvalidTransition("You can only cancel your own bookings.")
    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        _require_pending(booking, "cancel")
        booking.status = Booking.STATUS_CANCELLED
        booking.cancelled_at = timezone.now()
        booking.save(update_fields=["status", "cancelled_at"])
    logger.info("Booking %s cancelled by user %s", booking.pk, user.pk)
    return booking


def delete_booking(booking):
    booking_id = booking.pk
    booking.delete()
    logger.info("Booking %s deleted", booking_id)


def user_booking_summary(user):
    bookings = list(
        Booking.objects.filter(user=user).select_related("stadium").order_by("-created_at")
    )
    confirmed = [b for b in bookings if b.status == Booking.STATUS_CONFIRMED]
    return {
        "bookings": bookings,
        "total": len(bookings),
        "confirmed": len(confirmed),
        "pending": sum(1 for b in bookings if b.status == Booking.STATUS_PENDING),
        "cancelled": sum(1 for b in bookings if b.status == Booking.STATUS_CANCELLED),
        "total_spent": sum((b.total_price for b in confirmed), start=0),
        "confirmation_rate": round(len(confirmed) / len(bookings) * 100) if bookings else 0,
    }


# -------------------------
# Users
# -------------------------
def set_user_status(profile, status):
    if status not in dict(UserProfile.STATUS_CHOICES):
        raise ValueError(f"Unknown status {status!r}")
    profile.status = status
    profile.save(update_fields=["status"])
    logger.info("User %s status -> %s", profile.user_id, status)
    return profile


def set_user_role(profile, role):
    if role not in dict(UserProfile.ROLE_CHOICES):
        raise ValueError(f"Unknown role {role!r}")
    profile.role = role
    profile.save(update_fields=["role"])
    logger.info("User %s role -> %s", profile.user_id, role)
    return profile


def search_users(term="", status="all", role="all"):
    qs = UserProfile.objects.select_related("user")
    term = (term or "").strip()
    if term:
        matches = (
            qs.filter(user__first_name__icontains=term)
            | qs.filter(user__email__icontains=term)
            | qs.filter(phone__icontains=term)
        )
        if term.isdigit():
            matches = matches | qs.filter(user__pk=int(term))
        qs = matches
    if status and status != "all":
        qs = qs.filter(status=status)
    if role and role != "all":
        qs = qs.filter(role=role)
    return qs.order_by("-created_at")
