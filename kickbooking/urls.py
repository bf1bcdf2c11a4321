# kickbooking/urls.py
from django.contrib import admin
from django.urls import path
from booking import admin_views, api_views, views
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('django-admin/', admin.site.urls),

    # Public pages
    path('', views.home, name='home'),
    path('about/', views.about, name='about'),
    path('services/', views.services_page, name='services'),
    path('contact/', views.contact, name='contact'),
    path('stadiums/', views.stadium_list, name='stadiums'),

    # Auth
    path('login/', views.login_page, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('register/', views.register_page, name='register'),

    # User area
    path('user/dashboard/', views.user_dashboard, name='user-dashboard'),
    path('user/book-stadium/', views.book_stadium, name='book-stadium'),
    path('user/book-stadium/<int:stadium_id>/', views.stadium_booking, name='stadium-booking'),
    path('user/booking-confirmation/', views.booking_confirmation, name='booking-confirmation'),
    path('user/my-bookings/', views.my_bookings, name='my-bookings'),
    path('user/my-bookings/<int:booking_id>/cancel/', views.cancel_booking, name='cancel-booking'),
    path('user/profile/', views.edit_profile, name='edit-profile'),

    # Admin console
    path('admin/dashboard/', admin_views.dashboard, name='admin-dashboard'),
    path('admin/stadiums/', admin_views.stadiums, name='console-stadiums'),
    path('admin/stadiums/add/', admin_views.stadium_form, name='console-stadium-add'),
    path('admin/stadiums/<int:stadium_id>/edit/', admin_views.stadium_form, name='console-stadium-edit'),
    path('admin/stadiums/<int:stadium_id>/toggle/', admin_views.toggle_stadium, name='console-stadium-toggle'),
    path('admin/stadiums/<int:stadium_id>/delete/', admin_views.delete_stadium, name='console-stadium-delete'),
    path('admin/bookings/', admin_views.bookings, name='console-bookings'),
    path('admin/bookings/<int:booking_id>/approve/', admin_views.approve_booking, name='console-booking-approve'),
    path('admin/bookings/<int:booking_id>/reject/', admin_views.reject_booking, name='console-booking-reject'),
    path('admin/bookings/<int:booking_id>/delete/', admin_views.delete_booking, name='console-booking-delete'),
    path('admin/users/', admin_views.users, name='console-users'),
    path('admin/users/<int:user_id>/edit/', admin_views.edit_user, name='console-user-edit'),
    path('admin/users/<int:user_id>/status/', admin_views.user_status, name='console-user-status'),
    path('admin/users/<int:user_id>/role/', admin_views.user_role, name='console-user-role'),
    path('admin/users/<int:user_id>/delete/', admin_views.delete_user, name='console-user-delete'),
    path('admin/reports/', admin_views.reports, name='console-reports'),
    path('admin/reports/export.csv', admin_views.reports_csv, name='console-reports-csv'),

    # Payments
    path('api/pay/', api_views.record_payment, name='api-pay'),
    path('pay/', api_views.start_payment, name='pay'),
    path('thankyou/', api_views.payment_thankyou, name='payment-thankyou'),
    path('postback/', api_views.payment_postback, name='payment-postback'),
]

# Serve uploaded stadium images in DEBUG
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
