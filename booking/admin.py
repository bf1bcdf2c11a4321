from django.contrib import admin

from . import services
from .exceptions import BookingError
from .models import Booking, ContactMessage, Payment, Stadium, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'phone', 'role', 'status', 'created_at')
    list_filter = ('role', 'status')
    search_fields = ('user__username', 'user__email', 'user__first_name', 'phone')


@admin.register(Stadium)
class StadiumAdmin(admin.ModelAdmin):
    list_display = ('name', 'location', 'capacity', 'price_per_hour', 'rating', 'is_active')
    list_filter = ('is_active', 'location')
    search_fields = ('name', 'location')

    actions = ['activate_stadiums', 'deactivate_stadiums']

    def activate_stadiums(self, request, queryset):
        for stadium in queryset:
            services.activate_stadium(stadium)
        self.message_user(request, "Selected stadiums have been activated.")

    def deactivate_stadiums(self, request, queryset):
        for stadium in queryset:
            services.deactivate_stadium(stadium)
        self.message_user(request, "Selected stadiums have been deactivated.")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('stadium', 'user', 'date', 'start_time', 'end_time', 'total_price', 'status', 'created_at')
    list_filter = ('status', 'stadium')
    search_fields = ('stadium__name', 'user__username', 'user__email', 'transaction_number')
    readonly_fields = ('duration', 'total_price', 'created_at', 'approved_at', 'cancelled_at')

    actions = ['approve_bookings', 'reject_bookings']

    def approve_bookings(self, request, queryset):
        approved = 0
        for booking in queryset:
            try:
                services.approve_booking(booking)
                approved += 1
            except BookingError as exc:
                self.message_user(request, f"Booking {booking.pk}: {exc}")
        self.message_user(request, f"{approved} booking(s) approved.")

    def reject_bookings(self, request, queryset):
        rejected = 0
        for booking in queryset:
            try:
                services.reject_booking(booking, "Rejected by admin")
                rejected += 1
            except BookingError as exc:
                self.message_user(request, f"Booking {booking.pk}: {exc}")
        self.message_user(request, f"{rejected} booking(s) rejected.")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('order_id', 'user', 'amount', 'currency', 'status', 'created_at')
    list_filter = ('status', 'currency')
    search_fields = ('order_id', 'customer_email', 'customer_name')


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'inquiry_type', 'subject', 'created_at')
    list_filter = ('inquiry_type',)
    search_fields = ('name', 'email', 'subject')
