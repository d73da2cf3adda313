from milkbook.models.account import Account
from milkbook.models.customer import Customer
from milkbook.models.delivery import Delivery, DeliveryStatus

__all__ = [
    "Account",
    "Customer",
    "Delivery",
    "DeliveryStatus",
]
