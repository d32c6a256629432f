import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.app.main import create_app
from storefront.app.schemas import PaymentRequest
from storefront.app.services.payments import PaymentDeclined, PaymentService
from storefront.common import ServiceSettings


def _run(coro):
    return asyncio.run(coro)


def _prepare_app(tmp_path) -> FastAPI:
    settings = ServiceSettings(
        app_name="Storefront Payment Test",
        enable_metrics=False,
        enable_tracing=False,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'payments.db'}",
    )
    return create_app(settings)


def _card(**overrides: Any) -> dict[str, Any]:
    payload = {"amount": "120.00", "cardNumber": "4111111111111111", "expiryDate": "12/29", "cvv": "123"}
    payload.update(overrides)
    return payload


def test_payment_outcomes(tmp_path) -> None:
    app = _prepare_app(tmp_path)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                approved = await client.post("/payment", json=_card())
                assert approved.status_code == 200
                data = approved.json()["data"]
                assert data["status"] == "success"
                assert data["transactionId"].startswith("txn_")

                other = await client.post("/payment", json=_card())
                assert other.json()["data"]["transactionId"] != data["transactionId"]

                wrong_network = await client.post("/payment", json=_card(cardNumber="5500000000000004"))
                assert wrong_network.status_code == 400
                assert wrong_network.json() == {
                    "data": None,
                    "message": "Payment failed. Invalid card or amount exceeds limit",
                    "success": False,
                }

                over_limit = await client.post("/payment", json=_card(amount="1000.01"))
                assert over_limit.status_code == 400

                short_cvv = await client.post("/payment", json=_card(cvv="12"))
                assert short_cvv.status_code == 400
                assert "cvv" in short_cvv.json()["message"]

    _run(body())


@pytest.mark.asyncio
async def test_payment_limit_is_inclusive() -> None:
    service = PaymentService(Decimal("50"))
    result = await service.process_payment(
        PaymentRequest(amount=Decimal("50.00"), cardNumber="4000000000000002", expiryDate="01/2030", cvv="999")
    )
    assert result.status == "success"

    with pytest.raises(PaymentDeclined):
        await service.process_payment(
            PaymentRequest(amount=Decimal("50.01"), cardNumber="4000000000000002", expiryDate="01/2030", cvv="999")
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with app.router.lifespan_context(app):
        yield
