from .tenancy import Business, Store
from .auth import User, CashierSession
from .inventory import Product, ProductInventory
from .orders import Order
from .security import SecurityEvent

__all__ = [
    'Business', 'Store',
    'User', 'CashierSession',
    'Product', 'ProductInventory',
    'Order',
    'SecurityEvent',
]
