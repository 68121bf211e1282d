from .brands import Brand
from .inventory import Product
from .sales import Sale, SaleLine
from .audit import AuditLog
from .settings import StoreProfile, STORE_PROFILE_ID
from .auth import OperatorSession

__all__ = [
    'Brand',
    'Product',
    'Sale', 'SaleLine',
    'AuditLog',
    'StoreProfile', 'STORE_PROFILE_ID',
    'OperatorSession',
]
