import logging
import uuid
from decimal import Decimal, InvalidOperation

import httpx
from django.conf import settings
from django.db import transaction

from .exceptions import PaymentGatewayError
from .models import Payment

logger = logging.getLogger(__name__)


class ExpressPayClient:
    """Client for the ExpressPay merchant API (form-encoded POSTs)."""

    def __init__(self, api_url=None, merchant_id=None, api_key=None, timeout=None, transport=None):
        self.api_url = (api_url or settings.EXPRESSPAY_API_URL).rstrip("/")
        self.merchant_id = merchant_id or settings.EXPRESSPAY_MERCHANT_ID
        self.api_key = api_key or settings.EXPRESSPAY_API_KEY
        self.timeout = timeout or settings.EXPRESSPAY_TIMEOUT
        self.transport = transport

    @property
    def submit_endpoint(self):
        return f"{self.api_url}/submit.php"

    @property
    def status_endpoint(self):
        return f"{self.api_url}/query.php"

    def checkout_url(self, token):
        return f"{self.api_url}/checkout.php?token={token}"

    def _post(self, url, payload):
        data = {"merchant_id": self.merchant_id, "api_key": self.api_key, **payload}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, data=data)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("ExpressPay %s returned %s", url, exc.response.status_code)
            raise PaymentGatewayError(f"Gateway returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("ExpressPay %s request failed: %s", url, exc)
            raise PaymentGatewayError("Payment gateway unreachable") from exc
        except ValueError as exc:
            logger.error("ExpressPay %s sent a non-JSON body", url)
            raise PaymentGatewayError("Malformed gateway response") from exc

    def submit(self, amount, order_id, customer_name, customer_email,
               currency=None, description=None, redirect_url=None, cancel_url=None):
        data = self._post(self.submit_endpoint, {
            "amount": str(amount),
            "currency": currency or settings.BOOKING_CURRENCY,
            "order_id": order_id,
            "description": description or "KickBooking Payment",
            "customer_name": customer_name,
            "customer_email": customer_email,
            "redirect_url": redirect_url or settings.EXPRESSPAY_REDIRECT_URL,
            "cancel_url": cancel_url or settings.EXPRESSPAY_CANCEL_URL,
        })
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise PaymentGatewayError("No token received from ExpressPay")
        return token

    def query(self, token):
        data = self._post(self.status_endpoint, {"token": token})
        status = data.get("status") if isinstance(data, dict) else None
        if status in (None, ""):
            raise PaymentGatewayError("No status received from ExpressPay")
        return str(status)


def get_client():
    return ExpressPayClient()


def parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValueError("amount must be a number")
    if amount <= 0:
        raise ValueError("amount must be positive")
    return amount.quantize(Decimal("0.01"))


def initiate_payment(amount, customer_name, customer_email, user=None, booking=None,
                     order_id=None, currency=None, description=None, client=None):
    """
    Open a checkout with the gateway and record the payment as Pending.
    Re-using an ``order_id`` returns the stored checkout instead of opening a
    second one.
    """
    client = client or get_client()
    amount = parse_amount(amount)
    order_id = order_id or uuid.uuid4().hex

    existing = Payment.objects.filter(order_id=order_id).first()
    if existing is not None and existing.token:
        logger.info("Payment %s already initiated, reusing token", order_id)
        return existing, client.checkout_url(existing.token)

    token = client.submit(
        amount=amount,
        order_id=order_id,
        customer_name=customer_name,
        customer_email=customer_email,
        currency=currency,
        description=description,
    )
    payment, _ = Payment.objects.update_or_create(
        order_id=order_id,
        defaults={
            "user": user,
            "booking": booking,
            "amount": amount,
            "currency": currency or settings.BOOKING_CURRENCY,
            "status": "Pending",
            "token": token,
            "customer_name": customer_name or "",
            "customer_email": customer_email or "",
        },
    )
    logger.info("Payment %s initiated for %s %s", order_id, payment.currency, amount)
    return payment, client.checkout_url(token)


def refresh_payment_status(order_id, token, client=None):
    """Ask the gateway for the status of ``token`` and store it on the payment."""
    client = client or get_client()
    status = client.query(token)
    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(order_id=order_id).first()
        if payment is None:
            logger.warning("Status %s received for unknown order %s", status, order_id)
            return None, status
        if payment.status != status:
            logger.info("Payment %s status %s -> %s", order_id, payment.status, status)
            payment.status = status
            payment.save(update_fields=["status", "updated_at"])
    return payment, status
