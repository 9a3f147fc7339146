from .inventory import Product
from .customers import Customer
from .sales import Sale, Payment

__all__ = [
    'Product',
    'Customer',
    'Sale', 'Payment',
]
