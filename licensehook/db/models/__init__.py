"""Re-export all models so Base.metadata sees them."""

from licensehook.db.models.customer import Customer
from licensehook.db.models.event import Event
from licensehook.db.models.license import License
from licensehook.db.models.subscription import Subscription

__all__ = [
    "Customer",
    "Event",
    "License",
    "Subscription",
]
