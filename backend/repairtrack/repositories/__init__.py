from .base import BulkResult, OrderRepository
from .memory import InMemoryOrderRepository
from .sqlalchemy_repository import SqlAlchemyOrderRepository

__all__ = [
    'BulkResult', 'OrderRepository',
    'InMemoryOrderRepository', 'SqlAlchemyOrderRepository',
]
