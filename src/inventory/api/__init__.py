from inventory.api.errors import register_error_handlers
from inventory.api.routes import inventory_router, order_router

__all__ = ["inventory_router", "order_router", "register_error_handlers"]
