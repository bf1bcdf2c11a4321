# booking/api_views.py
import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.contrib.auth.models import User
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt

from . import payments, services
from .exceptions import BookingConflict, BookingError, DuplicateTransaction, PaymentGatewayError
from .models import Booking, Stadium

logger = logging.getLogger(__name__)

PAY_FIELDS = (
    "total_price",
    "booking_date",
    "start_time",
    "end_time",
    "user_id",
    "stadium_id",
    "transaction_name",
    "transaction_number",
)


def _json_body(request):
    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
    return request.POST.dict()


def _method_not_allowed(allowed="POST"):
    response = JsonResponse({"error": "Method Not Allowed"}, status=405)
    response["Allow"] = allowed
    return response


def _client_total(value):
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _parse_time(value):
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(str(value), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"invalid time {value!r}")


@csrf_exempt
def record_payment(request):
    """
    Record a booking request paid by mobile money. Expects JSON with every
    PAY_FIELDS key; stores a pending booking and returns it.
    """
    if request.method != "POST":
        return _method_not_allowed()

    body = _json_body(request)
    if body is None or any(body.get(field) is None for field in PAY_FIELDS):
        return JsonResponse({"error": "Missing required fields"}, status=400)

    transaction_number = str(body["transaction_number"]).strip()
    existing = Booking.objects.filter(transaction_number=transaction_number).first() if transaction_number else None
    if existing is not None:
        logger.info("Transaction %s already recorded as booking %s", transaction_number, existing.pk)
        return JsonResponse(existing.to_dict())

    try:
        booking_date = datetime.strptime(str(body["booking_date"]), "%Y-%m-%d").date()
        start_time = _parse_time(body["start_time"])
        end_time = _parse_time(body["end_time"])
        user = User.objects.get(pk=int(body["user_id"]))
        stadium = Stadium.objects.get(pk=int(body["stadium_id"]))
    except (ValueError, TypeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)
    except User.DoesNotExist:
        return JsonResponse({"error": "Unknown user"}, status=400)
    except Stadium.DoesNotExist:
        return JsonResponse({"error": "Unknown stadium"}, status=400)

    try:
        booking = services.create_booking(
            user=user,
            stadium=stadium,
            date=booking_date,
            start_time=start_time,
            end_time=end_time,
            notes=str(body.get("notes") or ""),
            transaction_name=str(body["transaction_name"]),
            transaction_number=transaction_number,
        )
    except DuplicateTransaction as exc:
        # recorded by a concurrent request since the lookup above
        existing = Booking.objects.filter(transaction_number=transaction_number).first()
        if existing is None:
            return JsonResponse({"error": str(exc)}, status=409)
        return JsonResponse(existing.to_dict())
    except BookingConflict as exc:
        return JsonResponse({"error": str(exc)}, status=409)
    except BookingError as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    if _client_total(body["total_price"]) != booking.total_price:
        logger.warning(
            "Booking %s: client total %s differs from computed %s",
            booking.pk, body["total_price"], booking.total_price,
        )
    return JsonResponse(booking.to_dict())


@csrf_exempt
def start_payment(request):
    if request.method != "POST":
        return _method_not_allowed()

    body = _json_body(request)
    if body is None or body.get("amount") is None:
        return JsonResponse({"error": "amount is required"}, status=400)

    try:
        user = None
        if body.get("user_id"):
            user = User.objects.filter(pk=int(body["user_id"])).first()
        booking = None
        if body.get("booking_id"):
            booking = Booking.objects.filter(pk=int(body["booking_id"])).first()
        payment, checkout_url = payments.initiate_payment(
            amount=body["amount"],
            customer_name=body.get("customer_name", ""),
            customer_email=body.get("customer_email", ""),
            user=user,
            booking=booking,
            order_id=body.get("order_id"),
            currency=body.get("currency"),
            description=body.get("description"),
        )
    except (ValueError, TypeError) as exc:
        return JsonResponse({"error": str(exc)}, status=400)
    except PaymentGatewayError as exc:
        return JsonResponse({"error": str(exc) or "Payment initiation failed"}, status=502)

    return JsonResponse({"checkout_url": checkout_url, "order_id": payment.order_id})


def payment_thankyou(request):
    order_id = request.GET.get("order_id")
    token = request.GET.get("token")
    if not (order_id and token):
        return HttpResponse("Could not verify payment.", status=400)
    try:
        payment, status = payments.refresh_payment_status(order_id, token)
    except PaymentGatewayError:
        return HttpResponse("Could not verify payment.", status=500)
    return render(request, "payment_thankyou.html", {"payment": payment, "status": status})


@csrf_exempt
def payment_postback(request):
    if request.method != "POST":
        return _method_not_allowed()
    body = _json_body(request) or {}
    order_id = body.get("order_id")
    token = body.get("token")
    if not (order_id and token):
        return JsonResponse({"error": "order_id and token are required"}, status=400)
    try:
        payments.refresh_payment_status(order_id, token)
    except PaymentGatewayError as exc:
        return JsonResponse({"error": str(exc) or "Postback failed"}, status=500)
    return JsonResponse({"message": "OK"})
