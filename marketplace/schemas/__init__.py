from marketplace.schemas.listing import ListingPayload
from marketplace.schemas.review import ReviewPayload, ReviewFields
from marketplace.schemas.user import SignupPayload, LoginPayload
from marketplace.schemas.validation import SCHEMAS, Violation, ValidationResult, validate_payload

__all__ = [
    "ListingPayload",
    "ReviewPayload", "ReviewFields",
    "SignupPayload", "LoginPayload",
    "SCHEMAS", "Violation", "ValidationResult", "validate_payload",
]
