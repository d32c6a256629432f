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
    db_file = tmp_path / "catalog.db"
    settings = ServiceSettings(
        app_name="Storefront Catalog Test",
        enable_metrics=False,
        enable_tracing=False,
        database_url=f"sqlite+aiosqlite:///{db_file}",
    )
    return create_app(settings), settings


def _headers(settings: ServiceSettings, user_id: int, role: str = "CUSTOMER") -> dict[str, str]:
    principal = Principal(user_id=user_id, email=f"user{user_id}@example.com", role=role)
    return {"Authorization": f"Bearer {create_token(principal, settings)}"}


def _product(name: str, price: str, category: str = "kitchen", **overrides: Any) -> dict[str, Any]:
    payload = {"name": name, "price": price, "category": category, "stockQuantity": 5}
    payload.update(overrides)
    return payload


def test_product_crud_requires_admin(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 1, role="ADMIN")
    customer = _headers(settings, 2)

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                denied = await client.post("/products", json=_product("Kettle", "24.00"), headers=customer)
                assert denied.status_code == 403
                assert denied.json()["success"] is False

                anonymous = await client.post("/products", json=_product("Kettle", "24.00"))
                assert anonymous.status_code == 401

                created = await client.post(
                    "/products", json=_product("Kettle", "24.00", images=["kettle.png"]), headers=admin
                )
                assert created.status_code == 201
                product = created.json()["data"]
                assert product["price"] == "24.00"
                assert product["images"] == ["kettle.png"]
                assert product["isActive"] is True

                fetched = await client.get(f"/products/{product['id']}")
                assert fetched.status_code == 200
                assert fetched.json()["data"]["name"] == "Kettle"

                updated = await client.put(
                    f"/products/{product['id']}", json={"price": "19.50", "isActive": False}, headers=admin
                )
                assert updated.status_code == 200
                assert updated.json()["data"]["price"] == "19.50"
                assert updated.json()["data"]["isActive"] is False
                assert updated.json()["data"]["name"] == "Kettle"

                negative = await client.post("/products", json=_product("Broken", "-1.00"), headers=admin)
                assert negative.status_code == 400

                deleted = await client.delete(f"/products/{product['id']}", headers=admin)
                assert deleted.status_code == 200
                assert (await client.get(f"/products/{product['id']}")).status_code == 404
                assert (await client.delete(f"/products/{product['id']}", headers=admin)).status_code == 404

    _run(body())


def test_list_products_filters_and_pages(tmp_path) -> None:
    app, settings = _prepare_app(tmp_path)
    admin = _headers(settings, 1, role="ADMIN")

    async def body() -> None:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                for payload in (
                    _product("Chef Knife", "45.00"),
                    _product("Bread Knife", "30.00"),
                    _product("Cutting Board", "15.00"),
                    _product("Desk Fan", "60.00", category="home"),
                    _product("Paring Knife", "12.00", isActive=False),
                ):
                    assert (await client.post("/products", json=payload, headers=admin)).status_code == 201

                everything = (await client.get("/products")).json()["data"]
                assert everything["totalProducts"] == 5
                assert everything["totalPages"] == 1
                assert [item["name"] for item in everything["products"]][:2] == ["Bread Knife", "Chef Knife"]

                knives = (await client.get("/products", params={"search": "KNIFE", "isActive": "true"})).json()["data"]
                assert sorted(item["name"] for item in knives["products"]) == ["Bread Knife", "Chef Knife"]

                priced = (
                    await client.get("/products", params={"category": "kitchen", "priceMin": "14", "priceMax": "31"})
                ).json()["data"]
                assert [item["name"] for item in priced["products"]] == ["Bread Knife", "Cutting Board"]

                paged = (await client.get("/products", params={"limit": 2, "page": 3})).json()["data"]
                assert paged["totalPages"] == 3
                assert paged["currentPage"] == 3
                assert [item["name"] for item in paged["products"]] == ["Paring Knife"]

                too_large = await client.get("/products", params={"limit": 500})
                assert too_large.status_code == 400

    _run(body())


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with app.router.lifespan_context(app):
        yield
