from .network import Franchise, Vehicle, Maintenance
from .finance import SalesRecord, Invoice
from .orders import Order
from .inventory import Product, Warehouse, StockLevel

__all__ = [
    'Franchise', 'Vehicle', 'Maintenance',
    'SalesRecord', 'Invoice',
    'Order',
    'Product', 'Warehouse', 'StockLevel',
]
