from app.orders.models.order import Order, OrderItem, OrderStatus, PaymentMethod

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
]
