"""
Product package for resolving catalog products.
"""

from .service import ProductService
from .repo import ProductRepo
from .presenter import products_result_text

__all__ = [
    'ProductService',
    'ProductRepo',
    'products_result_text',
]
