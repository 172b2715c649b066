from .inventory import Product, ProductVariant
from .customers import Customer
from .shifts import CashShift, CashMovement, ActiveShiftPointer
from .sales import Sale, SaleLine, SaleTender
from .purchases import Purchase, PurchaseLine
from .suppliers import Supplier
from .settings import StoreSettings

__all__ = [
    'Product', 'ProductVariant',
    'Customer',
    'CashShift', 'CashMovement', 'ActiveShiftPointer',
    'Sale', 'SaleLine', 'SaleTender',
    'Purchase', 'PurchaseLine',
    'Supplier',
    'StoreSettings',
]
