import asyncio
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.app.main import create_app
from storefront.common import ServiceSettings
from storefront.common.security import Principal, create_token


def _run(coro):
    return asyncio.run(coro)


def _prepare_app(tmp_path) -> tuple[FastAPI, ServiceSettings]:
    db_file = tmp_path / "cart.db"
    settings = ServiceSettings(
        app_name="Storefront Cart Test",
        enable_metrics=False,
        enable_tracing=False,
        database_url=f"sqlite+aiosqlite:///{db_file}",
    )
    return create_app(settings), settings


def _headers(settings: ServiceSettings, user_id: int, role: str = "CUSTOMER") -> dict[str, str]:
    principal = Principal(user_id=user_id, email=f"user{user_id}@example.com", role=role)
    return {"Authorization": f"Bearer {create_token(principal, settings)}"}


async def _create_product(client: AsyncClient, admin: dict[str, str], **overrides: Any) -> int:
    payload = {"name": "Notebook", "price": "3.25", "category": "stationery", "stockQuantity": 100}
    payload.update(overrides)
    response = await client.post("/products", json=payload, headers=admin)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def test_re_adding_product_merges_line(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 99, role="ADMIN")
    user = _headers(settings, 1)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                product_id = await _create_product(client, admin)
                await client.post("/cart/add-to-cart", json={"productId": product_id, "quantity": 2}, headers=user)
                response = await client.post(
                    "/cart/add-to-cart", json={"productId": product_id, "quantity": 3}, headers=user
                )
                assert response.status_code == 200
                cart = response.json()["data"]
                assert len(cart["items"]) == 1
                assert cart["items"][0]["quantity"] == 5
                assert cart["items"][0]["totalItemPrice"] == "16.25"
                assert cart["totalPrice"] == "16.25"
                assert response.json()["message"] == "Product added to cart"

    _run(body())


def test_cart_rejects_bad_input(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 99, role="ADMIN")
    user = _headers(settings, 1)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                product_id = await _create_product(client, admin)
                retired_id = await _create_product(client, admin, name="Retired", isActive=False)

                missing_cart = await client.get("/cart", headers=user)
                assert missing_cart.status_code == 404
                assert missing_cart.json()["message"] == "Cart not found"

                zero = await client.post("/cart/add-to-cart", json={"productId": product_id, "quantity": 0}, headers=user)
                assert zero.status_code == 400
                assert zero.json()["success"] is False

                unknown = await client.post("/cart/add-to-cart", json={"productId": 4242, "quantity": 1}, headers=user)
                assert unknown.status_code == 404
                assert unknown.json()["message"] == "Product not found"

                retired = await client.post("/cart/add-to-cart", json={"productId": retired_id, "quantity": 1}, headers=user)
                assert retired.status_code == 404

                anonymous = await client.post("/cart/add-to-cart", json={"productId": product_id, "quantity": 1})
                assert anonymous.status_code == 401

                forged = await client.get("/cart", headers={"Authorization": "Bearer not-a-token"})
                assert forged.status_code == 401

    _run(body())


def test_update_remove_and_clear_lines(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 99, role="ADMIN")
    user = _headers(settings, 1)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                notebook = await _create_product(client, admin)
                pen = await _create_product(client, admin, name="Pen", price="1.10")
                await client.post("/cart/add-to-cart", json={"productId": notebook, "quantity": 1}, headers=user)
                await client.post("/cart/add-to-cart", json={"productId": pen, "quantity": 1}, headers=user)

                updated = await client.put(f"/cart/items/{pen}", json={"quantity": 4}, headers=user)
                assert updated.status_code == 200
                assert updated.json()["data"]["totalPrice"] == "7.65"

                zeroed = await client.put(f"/cart/items/{notebook}", json={"quantity": 0}, headers=user)
                assert [item["productId"] for item in zeroed.json()["data"]["items"]] == [pen]

                absent = await client.delete(f"/cart/items/{notebook}", headers=user)
                assert absent.status_code == 404
                assert absent.json()["message"] == "Product not found in cart"

                removed = await client.delete(f"/cart/items/{pen}", headers=user)
                assert removed.status_code == 200
                assert removed.json()["data"]["items"] == []
                assert removed.json()["data"]["totalPrice"] == "0.00"

                await client.post("/cart/add-to-cart", json={"productId": pen, "quantity": 2}, headers=user)
                cleared = await client.delete("/cart", headers=user)
                assert cleared.status_code == 200
                assert cleared.json()["data"]["items"] == []

    _run(body())


def test_concurrent_adds_for_one_user_are_not_lost(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 99, role="ADMIN")
    user = _headers(settings, 1)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                product_id = await _create_product(client, admin, price="2.00")
                responses = await asyncio.gather(
                    *(
                        client.post(
                            "/cart/add-to-cart", json={"productId": product_id, "quantity": 1}, headers=user
                        )
                        for _ in range(8)
                    )
                )
                assert all(response.status_code == 200 for response in responses)

                cart = (await client.get("/cart", headers=user)).json()["data"]
                assert cart["items"][0]["quantity"] == 8
                assert cart["totalPrice"] == "16.00"

    _run(body())


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with app.router.lifespan_context(app):
        yield
