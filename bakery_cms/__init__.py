"""
Bakery CMS - persistence core for a bakery order-management application.

Products, orders, payments, stock items and brands are soft deleted with a
``deleted_at`` timestamp, read through three query scopes and cascaded from
orders to their items and payments.
"""

__version__ = "1.0.0"
__author__ = "Bakery CMS Team"

from .config import BakeryConfig, configure, get_config, set_config

__all__ = [
    "__version__",
    "BakeryConfig",
    "get_config",
    "set_config",
    "configure",
]
