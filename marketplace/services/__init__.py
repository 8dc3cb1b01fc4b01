from marketplace.services.auth import AuthService, hash_password, verify_password
from marketplace.services.geocoding import MapboxGeocoder, get_geocoder
from marketplace.services.image_storage import CloudinaryImageStorage, StoredImage, get_image_storage
from marketplace.services.listings import ListingService, ListingPage
from marketplace.services.reviews import ReviewService
from marketplace.services.sanitizer import strip_markup

__all__ = [
    "AuthService", "hash_password", "verify_password",
    "MapboxGeocoder", "get_geocoder",
    "CloudinaryImageStorage", "StoredImage", "get_image_storage",
    "ListingService", "ListingPage",
    "ReviewService",
    "strip_markup",
]
