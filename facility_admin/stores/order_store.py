"""Order store."""
import time
from datetime import datetime
from typing import Any, Dict, List

import pytz

from facility_admin.stores.base import EntityStore

ORDER_STATUSES = ["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PAYMENT_STATUSES = ["pending", "paid", "failed", "refunded"]


def build_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize an order line, fixing its total price."""
    quantity = item.get("quantity") or 0
    unit_price = item.get("unitPrice") or 0
    return {
        "productId": item.get("productId"),
        "productName": item.get("productName", ""),
        "storeId": item.get("storeId"),
        "storeName": item.get("storeName", ""),
        "quantity": quantity,
        "unitPrice": unit_price,
        "totalPrice": quantity * unit_price,
    }


def compute_totals(items: List[Dict[str, Any]], tax: float = 0, shipping: float = 0) -> Dict[str, float]:
    """Subtotal is the sum of quantity x unit price; total adds tax and shipping."""
    subtotal = sum((i.get("quantity") or 0) * (i.get("unitPrice") or 0) for i in items)
    return {"subtotal": subtotal, "total": subtotal + (tax or 0) + (shipping or 0)}


class OrderStore(EntityStore):
    """Orders of a project, newest first."""

    collection_name = "orders"
    entity_label = "order"
    order_by = "orderDate"
    descending = True
    filter_fields = {"status": "status", "userId": "userId", "date": "orderDate"}

    def shape(self, data: Dict[str, Any]) -> Dict[str, Any]:
        items = [build_item(i) for i in data.get("items") or []]
        tax = data.get("tax") or 0
        shipping = data.get("shipping") or 0
        return {
            "orderNumber": data.get("orderNumber") or f"ORD-{int(time.time() * 1000)}",
            "userId": data.get("userId"),
            "userName": data.get("userName", ""),
            "userEmail": data.get("userEmail", ""),
            "items": items,
            "tax": tax,
            "shipping": shipping,
            **compute_totals(items, tax, shipping),
            "status": data.get("status") or "pending",
            "paymentStatus": data.get("paymentStatus") or "pending",
            "paymentMethod": data.get("paymentMethod") or "",
            "shippingAddress": data.get("shippingAddress") or {},
            "notes": data.get("notes") or "",
            "orderDate": data.get("orderDate") or datetime.now(pytz.UTC).isoformat(),
        }

    async def update_order_status(self, project_id: str, order_id: str, status: str) -> Dict[str, Any]:
        if status not in ORDER_STATUSES:
            raise ValueError(f"Invalid order status: {status}")
        async with self._operation("updating order status"):
            return await self._update_fields(project_id, order_id, {"status": status})

    async def update_payment_status(self, project_id: str, order_id: str, payment_status: str) -> Dict[str, Any]:
        if payment_status not in PAYMENT_STATUSES:
            raise ValueError(f"Invalid payment status: {payment_status}")
        async with self._operation("updating payment status"):
            return await self._update_fields(project_id, order_id, {"paymentStatus": payment_status})

    async def add_order_item(self, project_id: str, order_id: str, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a line to a cached order and recompute its totals.

        Args:
            project_id: Project ID
            order_id: Order ID
            item: productId, productName, storeId, storeName, quantity, unitPrice

        Returns:
            The updated order

        Raises:
            LookupError: The order is not cached
        """
        async with self._operation("adding order item"):
            order = self.get(order_id)
            if order is None:
                raise LookupError(f"Order {order_id} not found")

            items = [*(order.get("items") or []), build_item(item)]
            totals = compute_totals(items, order.get("tax") or 0, order.get("shipping") or 0)
            return await self._update_fields(project_id, order_id, {"items": items, **totals})

    def orders_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [o for o in self.items if o.get("status") == status]

    def order_stats(self) -> Dict[str, Any]:
        total_orders = len(self.items)
        total_revenue = sum(o.get("total") or 0 for o in self.items)
        return {
            "totalOrders": total_orders,
            "totalRevenue": total_revenue,
            "pendingOrders": len(self.orders_by_status("pending")),
            "completedOrders": len(self.orders_by_status("delivered")),
            "cancelledOrders": len(self.orders_by_status("cancelled")),
            "averageOrderValue": total_revenue / total_orders if total_orders else 0,
        }


# Singleton instance
order_store = OrderStore()
