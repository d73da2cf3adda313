from milkbook.repositories.account_repository import AccountRepository
from milkbook.repositories.customer_repository import CustomerRepository
from milkbook.repositories.delivery_repository import DeliveryRepository

__all__ = [
    "AccountRepository",
    "CustomerRepository",
    "DeliveryRepository",
]
