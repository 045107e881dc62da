from .tenancy import Store
from .catalog import Complaint, InHousePreset
from .orders import Order, OrderComplaint
from .groups import OrderGroup, GroupExpense

__all__ = [
    'Store',
    'Complaint', 'InHousePreset',
    'Order', 'OrderComplaint',
    'OrderGroup', 'GroupExpense',
]
