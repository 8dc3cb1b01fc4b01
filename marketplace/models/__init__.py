from marketplace.models.user import User
from marketplace.models.listing import Listing
from marketplace.models.review import Review

__all__ = ["User", "Listing", "Review"]
