"""Order endpoints."""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from facility_admin.api.common import ensure_valid, get_or_404, store_errors
from facility_admin.schemas.order import (
    OrderForm,
    OrderItemForm,
    OrderStatusUpdate,
    PaymentStatusUpdate,
)
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_order_item
from facility_admin.stores.order_store import order_store

router = APIRouter(prefix="/projects/{project_id}/orders", tags=["orders"])


@router.get("")
async def list_orders(
    project_id: str,
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    order_date: Optional[str] = Query(None, alias="date", description="Exact orderDate"),
    search: Optional[str] = Query(None),
):
    """
    List orders, newest first.

    Status, user and date filters are applied by the document query; the
    search term is matched against the fetched orders.
    """
    await order_store.fetch(project_id, {"status": status, "userId": user_id, "date": order_date})
    if order_store.error:
        raise HTTPException(status_code=500, detail=f"Failed to fetch orders: {order_store.error}")
    return filter_items(order_store.items, search, SEARCH_FIELDS["orders"])


@router.get("/stats")
async def order_stats(project_id: str):
    await order_store.fetch(project_id)
    if order_store.error:
        raise HTTPException(status_code=500, detail=f"Failed to fetch orders: {order_store.error}")
    return order_store.order_stats()


@router.get("/{order_id}")
async def get_order(project_id: str, order_id: str):
    with store_errors("fetch order"):
        await order_store.ensure_fetched(project_id)
    return get_or_404(order_store, order_id)


@router.post("", status_code=201)
async def create_order(project_id: str, form: OrderForm):
    data = form.to_document()
    for item in data.get("items") or []:
        ensure_valid(validate_order_item(item))

    with store_errors("create order"):
        await order_store.ensure_fetched(project_id)
        return await order_store.add(project_id, data)


@router.delete("/{order_id}", status_code=204)
async def delete_order(project_id: str, order_id: str):
    with store_errors("delete order"):
        await order_store.ensure_fetched(project_id)
        await order_store.delete(project_id, order_id)


@router.put("/{order_id}/status")
async def set_order_status(project_id: str, order_id: str, body: OrderStatusUpdate):
    with store_errors("update order status"):
        await order_store.ensure_fetched(project_id)
        return await order_store.update_order_status(project_id, order_id, body.status)


@router.put("/{order_id}/payment-status")
async def set_payment_status(project_id: str, order_id: str, body: PaymentStatusUpdate):
    with store_errors("update payment status"):
        await order_store.ensure_fetched(project_id)
        return await order_store.update_payment_status(project_id, order_id, body.payment_status)


@router.post("/{order_id}/items", status_code=201)
async def add_order_item(project_id: str, order_id: str, form: OrderItemForm):
    """Append a line to an order; subtotal and total are recomputed."""
    item = form.to_document()
    ensure_valid(validate_order_item(item))

    with store_errors("add order item"):
        await order_store.ensure_fetched(project_id)
        return await order_store.add_order_item(project_id, order_id, item)
