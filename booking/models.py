from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q, Sum
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

CENTS = Decimal("0.01")


def hours_between(start_time, end_time):
    """Length of a same-day time range in hours, 0 when end is not after start."""
    start_dt = datetime.combine(datetime.min.date(), start_time)
    end_dt = datetime.combine(datetime.min.date(), end_time)
    if end_dt <= start_dt:
        return Decimal("0.00")
    minutes = Decimal(int((end_dt - start_dt).total_seconds() // 60))
    return (minutes / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)


class UserProfile(models.Model):
    ROLE_USER = "user"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = [
        (ROLE_USER, "User"),
        (ROLE_ADMIN, "Admin"),
    ]

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_SUSPENDED = "suspended"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_SUSPENDED, "Suspended"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    phone = models.CharField(max_length=30, blank=True, null=True)
    address = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user.username} profile"

    @property
    def name(self):
        return self.user.first_name or self.user.username

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN or self.user.is_staff or self.user.is_superuser

    @property
    def can_login(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def total_bookings(self):
        return self.user.bookings.count()

    @property
    def total_spent(self):
        total = self.user.bookings.filter(status=Booking.STATUS_CONFIRMED).aggregate(
            total=Sum("total_price")
        )["total"]
        return total or Decimal("0.00")


@receiver(post_save, sender=User)
def create_or_update_user_profile(sender, instance, created, **kwargs):
    if created:
        UserProfile.objects.create(user=instance)
    else:
        UserProfile.objects.get_or_create(user=instance)


def get_profile(user):
    """Profile for ``user``, created with the default role when missing."""
    profile, _ = UserProfile.objects.get_or_create(user=user)
    return profile


class Stadium(models.Model):
    name = models.CharField(max_length=150)
    location = models.CharField(max_length=255)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_hour = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(CENTS)]
    )
    rating = models.DecimalField(
        max_digits=2, decimal_places=1, default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    amenities = models.TextField(blank=True, help_text="Comma separated, e.g. Parking, Floodlights")
    description = models.TextField(blank=True)
    image = models.ImageField(upload_to='stadium_images/', blank=True, null=True)
    image_url = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name

    @property
    def status(self):
        return "active" if self.is_active else "inactive"

    @property
    def amenity_list(self):
        return [item.strip() for item in self.amenities.split(",") if item.strip()]

    @property
    def image_src(self):
        if self.image:
            return self.image.url
        return self.image_url or settings.DEFAULT_STADIUM_IMAGE

    @property
    def availability(self):
        if not self.is_active:
            return "Inactive"
        now = timezone.localtime()
        booked = self.bookings.filter(
            status=Booking.STATUS_CONFIRMED,
            date=now.date(),
            start_time__lte=now.time(),
            end_time__gt=now.time(),
        ).exists()
        return "Booked" if booked else "Available"

    def quote(self, start_time, end_time):
        """Return ``(duration_hours, total_price)`` for a slot at this stadium."""
        duration = hours_between(start_time, end_time)
        total = (duration * self.price_per_hour).quantize(CENTS, rounding=ROUND_HALF_UP)
        return duration, total


class BookingQuerySet(models.QuerySet):
    def overlapping(self, stadium, date, start_time, end_time):
        return self.filter(
            stadium=stadium,
            date=date,
            start_time__lt=end_time,
            end_time__gt=start_time,
        )


class Booking(models.Model):
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    stadium = models.ForeignKey(Stadium, on_delete=models.CASCADE, related_name='bookings')

    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration = models.DecimalField(max_digits=5, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    transaction_name = models.CharField(max_length=150, blank=True)
    transaction_number = models.CharField(max_length=100, blank=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    approved_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(name="booking_end_after_start", condition=Q(end_time__gt=models.F("start_time"))),
            models.UniqueConstraint(
                fields=["transaction_number"],
                condition=~Q(transaction_number=""),
                name="booking_unique_transaction_number",
            ),
        ]
        indexes = [
            models.Index(fields=["stadium", "date"], name="booking_stadium_date_idx"),
        ]

    def __str__(self):
        return f"{self.stadium.name} | {self.date} {self.time_slot}"

    @property
    def time_slot(self):
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def stadium_name(self):
        return self.stadium.name

    @property
    def user_name(self):
        return self.user.first_name or self.user.username

    @property
    def user_email(self):
        return self.user.email

    def to_dict(self):
        return {
            "id": self.pk,
            "stadium_id": self.stadium_id,
            "stadium_name": self.stadium_name,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "booking_date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "duration": str(self.duration),
            "total_price": str(self.total_price),
            "status": self.status,
            "notes": self.notes,
            "transaction_name": self.transaction_name,
            "transaction_number": self.transaction_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "rejection_reason": self.rejection_reason,
        }


class Payment(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    booking = models.ForeignKey(Booking, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    order_id = models.CharField(max_length=100, unique=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="GHS")
    status = models.CharField(max_length=30, default="Pending")
    token = models.CharField(max_length=255, blank=True)
    customer_name = models.CharField(max_length=150, blank=True)
    customer_email = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.order_id} ({self.status})"


class ContactMessage(models.Model):
    INQUIRY_CHOICES = [
        ("general", "General Inquiry"),
        ("booking", "Booking Support"),
        ("support", "Technical Support"),
        ("partnership", "Partnership"),
    ]

    name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    subject = models.CharField(max_length=200, blank=True)
    inquiry_type = models.CharField(max_length=20, choices=INQUIRY_CHOICES, default="general")
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} <{self.email}>: {self.subject or self.inquiry_type}"
