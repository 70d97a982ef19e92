"""
Company package for resolving customer companies.
"""

from .service import CompanyService
from .repo import CompanyRepo
from .presenter import company_result_text

__all__ = [
    'CompanyService',
    'CompanyRepo',
    'company_result_text',
]
