from marketplace.routers.listings import router as listings_router
from marketplace.routers.reviews import router as reviews_router
from marketplace.routers.users import router as users_router

__all__ = ["listings_router", "reviews_router", "users_router"]
