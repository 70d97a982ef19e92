"""
Order package for creating orders and reporting on them.
"""

from .service import OrderService, INITIAL_ORDER_STATUS
from .repo import OrderRepo
from .presenter import order_created_text, order_stats_text

__all__ = [
    'OrderService',
    'OrderRepo',
    'INITIAL_ORDER_STATUS',
    'order_created_text',
    'order_stats_text',
]
