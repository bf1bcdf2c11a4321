from django.core.exceptions import ValidationError


class BookingError(ValidationError):
    """Base error for booking rules; a ValidationError so forms can show it."""

    def __str__(self):
        return " ".join(self.messages)


class BookingConflict(BookingError):
    pass


class DuplicateTransaction(BookingError):
    """A mobile-money transaction number that is already attached to a booking."""


class InvalidTransition(BookingError):
    pass


class StadiumUnavailable(BookingError):
    pass


class PaymentGatewayError(Exception):
    pass
