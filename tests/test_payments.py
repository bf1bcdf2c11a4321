import json
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest
from django.urls import reverse

from booking import payments
from booking.exceptions import PaymentGatewayError
from booking.models import Payment


class FakeGateway:
    """Records gateway calls and answers like ExpressPay's submit and query endpoints."""

    def __init__(self, token="tok-123", status="Success"):
        self.token = token
        self.status = status
        self.calls = []

    def __call__(self, request):
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        self.calls.append((request.url.path, form))
        if request.url.path.endswith("/submit.php"):
            return httpx.Response(200, json={"status": 1, "token": self.token})
        return httpx.Response(200, json={"status": self.status, "token": form.get("token")})

    def client(self):
        return payments.ExpressPayClient(
            api_url="https://gateway.test/api/",
            merchant_id="m-1",
            api_key="k-1",
            timeout=5,
            transport=httpx.MockTransport(self),
        )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def use_gateway(gateway, monkeypatch):
    monkeypatch.setattr(payments, "get_client", gateway.client)
    return gateway


# -------------------------
# ExpressPayClient
# -------------------------
def test_submit_sends_credentials_and_returns_token(gateway):
    client = gateway.client()
    token = client.submit(
        amount=Decimal("300.00"), order_id="ord-1",
        customer_name="Kofi Mensah", customer_email="kofi@example.com",
    )
    assert token == "tok-123"
    path, form = gateway.calls[0]
    assert path == "/api/submit.php"
    assert form["merchant_id"] == "m-1"
    assert form["api_key"] == "k-1"
    assert form["amount"] == "300.00"
    assert form["currency"] == "GHS"
    assert client.checkout_url(token) == "https://gateway.test/api/checkout.php?token=tok-123"


def test_query_returns_status(gateway):
    assert gateway.client().query("tok-123") == "Success"
    assert gateway.calls[0][0] == "/api/query.php"


def test_http_error_becomes_gateway_error():
    client = payments.ExpressPayClient(
        api_url="https://gateway.test", merchant_id="m", api_key="k",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    with pytest.raises(PaymentGatewayError):
        client.query("tok")


def test_missing_token_is_an_error():
    client = payments.ExpressPayClient(
        api_url="https://gateway.test", merchant_id="m", api_key="k",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"status": 2})),
    )
    with pytest.raises(PaymentGatewayError):
        client.submit(amount=Decimal("10.00"), order_id="o", customer_name="", customer_email="")


def test_non_json_body_is_an_error():
    client = payments.ExpressPayClient(
        api_url="https://gateway.test", merchant_id="m", api_key="k",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
    )
    with pytest.raises(PaymentGatewayError):
        client.query("tok")


def test_parse_amount():
    assert payments.parse_amount("150") == Decimal("150.00")
    with pytest.raises(ValueError):
        payments.parse_amount("abc")
    with pytest.raises(ValueError):
        payments.parse_amount("-5")


# -------------------------
# initiate / refresh
# -------------------------
@pytest.mark.django_db
def test_initiate_payment_records_pending(gateway, player):
    payment, url = payments.initiate_payment(
        "300", "Kofi Mensah", "kofi@example.com", user=player, order_id="ord-1", client=gateway.client(),
    )
    assert url.endswith("checkout.php?token=tok-123")
    assert payment.status == "Pending"
    assert payment.amount == Decimal("300.00")
    assert payment.user == player


@pytest.mark.django_db
def test_initiate_payment_reuses_existing_order(gateway):
    client = gateway.client()
    first, _ = payments.initiate_payment("300", "Kofi", "kofi@example.com", order_id="ord-1", client=client)
    second, url = payments.initiate_payment("300", "Kofi", "kofi@example.com", order_id="ord-1", client=client)
    assert first.pk == second.pk
    assert len(gateway.calls) == 1
    assert url.endswith("token=tok-123")


@pytest.mark.django_db
def test_refresh_updates_status_once(gateway):
    Payment.objects.create(order_id="ord-1", amount=Decimal("300.00"), token="tok-123")
    client = gateway.client()
    payment, status = payments.refresh_payment_status("ord-1", "tok-123", client=client)
    assert status == "Success"
    assert payment.status == "Success"
    updated_at = Payment.objects.get(order_id="ord-1").updated_at

    payments.refresh_payment_status("ord-1", "tok-123", client=client)
    assert Payment.objects.get(order_id="ord-1").updated_at == updated_at


@pytest.mark.django_db
def test_refresh_unknown_order(gateway):
    payment, status = payments.refresh_payment_status("missing", "tok-123", client=gateway.client())
    assert payment is None
    assert status == "Success"


# -------------------------
# views
# -------------------------
@pytest.mark.django_db
def test_start_payment_view(client, use_gateway, player):
    response = client.post(
        reverse("pay"),
        data=json.dumps({"amount": "150.00", "customer_name": "Kofi", "user_id": player.id}),
        content_type="application/json",
    )
    assert response.status_code == 200
    body = response.json()
    assert body["checkout_url"].endswith("token=tok-123")
    assert Payment.objects.get(order_id=body["order_id"]).user == player


@pytest.mark.django_db
def test_start_payment_view_bad_amount(client, use_gateway):
    response = client.post(
        reverse("pay"), data=json.dumps({"amount": "free"}), content_type="application/json"
    )
    assert response.status_code == 400


@pytest.mark.django_db
def test_start_payment_view_bad_user_id(client, use_gateway):
    response = client.post(
        reverse("pay"), data=json.dumps({"amount": "10", "user_id": "abc"}), content_type="application/json"
    )
    assert response.status_code == 400
    assert not Payment.objects.exists()
    assert use_gateway.calls == []


@pytest.mark.django_db
def test_start_payment_view_gateway_down(client, monkeypatch):
    down = payments.ExpressPayClient(
        api_url="https://gateway.test", merchant_id="m", api_key="k",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    monkeypatch.setattr(payments, "get_client", lambda: down)
    response = client.post(reverse("pay"), data=json.dumps({"amount": "10"}), content_type="application/json")
    assert response.status_code == 502
    assert not Payment.objects.exists()


@pytest.mark.django_db
def test_thankyou_page(client, use_gateway):
    Payment.objects.create(order_id="ord-9", amount=Decimal("80.00"), token="tok-123")
    response = client.get(reverse("payment-thankyou"), {"order_id": "ord-9", "token": "tok-123"})
    assert response.status_code == 200
    assert response.context["status"] == "Success"
    assert Payment.objects.get(order_id="ord-9").status == "Success"


@pytest.mark.django_db
def test_thankyou_requires_parameters(client):
    assert client.get(reverse("payment-thankyou")).status_code == 400


@pytest.mark.django_db
def test_postback(client, use_gateway):
    use_gateway.status = "Failed"
    Payment.objects.create(order_id="ord-5", amount=Decimal("80.00"), token="tok-123")
    response = client.post(reverse("payment-postback"), {"order_id": "ord-5", "token": "tok-123"})
    assert response.json() == {"message": "OK"}
    assert Payment.objects.get(order_id="ord-5").status == "Failed"


@pytest.mark.django_db
def test_postback_requires_fields(client):
    response = client.post(reverse("payment-postback"), {"order_id": "ord-5"})
    assert response.status_code == 400
