"""HTTP tests for /api/admin/orders."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models import OrderStatus
from tests.factories import (
    ActivityFactory,
    LaundryFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    UserFactory,
    create_async,
)


async def _order(db: AsyncSession, **kwargs):
    customer = await create_async(UserFactory, db, name="Grace Hopper")
    laundry = await create_async(
        LaundryFactory, db, owner_id=customer.id, name="Bubble Bros"
    )
    order = await create_async(
        OrderFactory, db, laundry_id=laundry.id, customer_id=customer.id, **kwargs
    )
    return customer, laundry, order


@pytest.mark.integration
class TestListOrdersRoute:
    async def test_requires_super_admin(self, client: AsyncClient):
        response = await client.get("/api/admin/orders")

        assert response.status_code == 401

    async def test_lists_orders_with_statistics(
        self, admin_client: AsyncClient, db_session: AsyncSession
    ):
        _, laundry, order = await _order(db_session, status=OrderStatus.COMPLETED)

        response = await admin_client.get("/api/admin/orders")

        assert response.status_code == 200
        body = response.json()
        (row,) = body["orders"]
        assert row["orderNumber"] == order.order_number
        assert row["laundry"]["name"] == "Bubble Bros"
        assert row["itemsCount"] == 0
        assert body["statistics"]["totalRevenue"] == 25.0
        assert body["statistics"]["statusSummary"]["COMPLETED"] == {
            "count": 1,
            "revenue": 25.0,
        }
        assert body["pagination"]["totalCount"] == 1

    async def test_search_by_laundry_name(
        self, admin_client: AsyncClient, db_session: AsyncSession
    ):
        await _order(db_session)

        hit = await admin_client.get("/api/admin/orders", params={"search": "bubble"})
        miss = await admin_client.get("/api/admin/orders", params={"search": "zzz"})

        assert len(hit.json()["orders"]) == 1
        assert miss.json()["orders"] == []
        assert miss.json()["statistics"]["totalRevenue"] == 25.0

    async def test_limit_above_maximum_is_400(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/admin/orders", params={"limit": 500})

        assert response.status_code == 400
        assert "limit" in response.json()["error"]


@pytest.mark.integration
class TestOrderDetailRoute:
    async def test_detail_with_items_and_timeline(
        self, admin_client: AsyncClient, db_session: AsyncSession
    ):
        customer, laundry, order = await _order(db_session)
        product = await create_async(
            ProductFactory, db_session, laundry_id=laundry.id, name="Duvet"
        )
        await create_async(
            OrderItemFactory,
            db_session,
            order_id=order.id,
            product_id=product.id,
            quantity=2,
        )
        await create_async(
            ActivityFactory,
            db_session,
            order_id=order.id,
            laundry_id=laundry.id,
            user_id=customer.id,
        )

        response = await admin_client.get(f"/api/admin/orders/{order.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["customer"]["id"] == customer.id
        assert "memberSince" in body["customer"]
        assert body["items"][0]["product"]["name"] == "Duvet"
        assert body["items"][0]["total"] == 20.0
        assert len(body["timeline"]) == 1
        assert body["timeline"][0]["user"]["name"] == "Grace Hopper"

    async def test_unknown_order_is_404(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/admin/orders/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}
