"""Domain models for the retail kernel."""

from retail_kernel.models.category import Category
from retail_kernel.models.product import Product
from retail_kernel.models.register import Register
from retail_kernel.models.transaction import LedgerTransaction

__all__ = [
    "Category",
    "LedgerTransaction",
    "Product",
    "Register",
]
