from .inventory import Item
from .customers import Customer
from .promotions import Promotion
from .transactions import Transaction
from .auth import User, SessionToken

__all__ = [
    'Item',
    'Customer',
    'Promotion',
    'Transaction',
    'User', 'SessionToken',
]
