"""Enumerations shared by the bakery tables."""

from enum import Enum


class BusinessType(str, Enum):
    MADE_TO_ORDER = "made-to-order"
    READY_TO_SELL = "ready-to-sell"
    BOTH = "both"


class ProductStatus(str, Enum):
    AVAILABLE = "available"
    OUT_OF_STOCK = "out-of-stock"


class OrderStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    PAID = "paid"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    TEMPORARY = "temporary"
    OFFICIAL = "official"


class BusinessModel(str, Enum):
    MADE_TO_ORDER = "made-to-order"
    READY_TO_SELL = "ready-to-sell"


class PaymentMethod(str, Enum):
    CASH = "cash"
    VIETQR = "vietqr"
    BANK_TRANSFER = "bank-transfer"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class StockItemStatus(str, Enum):
    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class MovementType(str, Enum):
    RECEIVED = "received"
    USED = "used"
    ADJUSTED = "adjusted"
    DAMAGED = "damaged"
    EXPIRED = "expired"
