"""
Сервис объявлений: постраничный список, создание, редактирование и
каскадное удаление вместе с отзывами и изображением.
"""
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from marketplace.config import get_settings
from marketplace.errors import (
    AuthorizationDenied, NotFound, PersistenceError, ValidationFailed, ExternalServiceError
)
from marketplace.models import Listing, Review, User
from marketplace.schemas import ListingPayload, validate_payload
from marketplace.services.geocoding import MapboxGeocoder
from marketplace.services.image_storage import CloudinaryImageStorage, StoredImage
from marketplace.services.sanitizer import strip_markup

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class ListingPage:
    """Страница списка объявлений"""
    items: List[Listing] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 12
    pages: int = 1


class ListingService:

    def __init__(
        self,
        db: Session,
        geocoder: Optional[MapboxGeocoder] = None,
        image_storage: Optional[CloudinaryImageStorage] = None,
    ):
        self.db = db
        self.geocoder = geocoder
        self.image_storage = image_storage

    def list_page(self, page: int = 1, per_page: Optional[int] = None) -> ListingPage:
        """
        Возвращает страницу объявлений в порядке добавления.
        При ошибке БД отдает пустую страницу вместо исключения.
        """
        per_page = per_page or settings.page_size
        page = max(page, 1)

        try:
            total = self.db.query(Listing).count()
            items = self.db.query(Listing)\
                .options(joinedload(Listing.owner))\
                .order_by(Listing.id.asc())\
                .offset((page - 1) * per_page)\
                .limit(per_page)\
                .all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching listings: {e}")
            self.db.rollback()
            return ListingPage(per_page=per_page)

        pages = (total + per_page - 1) // per_page
        return ListingPage(items=items, total=total, page=page, per_page=per_page, pages=pages)

    def get(self, listing_id: int) -> Listing:
        """Объявление с владельцем и отзывами (с авторами)"""
        try:
            listing = self.db.query(Listing)\
                .options(
                    joinedload(Listing.owner),
                    selectinload(Listing.reviews).joinedload(Review.author),
                )\
                .filter(Listing.id == listing_id)\
                .first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error fetching listing {listing_id}: {e}")
            raise PersistenceError("Failed to fetch listing details") from e

        if not listing:
            raise NotFound("Listing does not exist")
        return listing

    def get_owned(self, listing_id: int, user: User) -> Listing:
        """Объявление, которым владеет user; иначе AuthorizationDenied"""
        listing = self.get(listing_id)
        if listing.owner_id != user.id:
            logger.warning(f"User {user.id} is not the owner of listing {listing_id}")
            raise AuthorizationDenied(
                "You are not the owner of this listing",
                redirect_to=f"/listings/{listing_id}",
            )
        return listing

    def create(self, payload: ListingPayload, image: Optional[BinaryIO], owner: User) -> Listing:
        if image is None:
            raise ValidationFailed(['"image" is required'])

        fields = self._clean_fields(payload)
        longitude, latitude = self._locate(fields["location"], fields["country"])
        stored = self._require_storage().upload(image)

        listing = Listing(
            **fields,
            geometry_type="Point",
            longitude=longitude,
            latitude=latitude,
            image_url=stored.url,
            image_filename=stored.filename,
            owner_id=owner.id,
        )
        self.db.add(listing)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving listing '{fields['title']}': {e}")
            self._discard_image(stored.filename)
            raise PersistenceError("Failed to create listing") from e

        self.db.refresh(listing)
        logger.info(f"Listing {listing.id} created by user {owner.id}")
        return listing

    def update(
        self,
        listing_id: int,
        payload: ListingPayload,
        image: Optional[BinaryIO],
        user: User,
    ) -> Listing:
        """Обновляет поля, координаты пересчитываются при каждом редактировании"""
        listing = self.get_owned(listing_id, user)

        fields = self._clean_fields(payload)
        longitude, latitude = self._locate(fields["location"], fields["country"])

        new_image: Optional[StoredImage] = None
        if image is not None:
            new_image = self._require_storage().upload(image)
            if listing.image_filename:
                try:
                    self.image_storage.destroy(listing.image_filename)
                except ExternalServiceError:
                    self._discard_image(new_image.filename)
                    raise

        for key, value in fields.items():
            setattr(listing, key, value)
        listing.geometry_type = "Point"
        listing.longitude = longitude
        listing.latitude = latitude
        if new_image is not None:
            listing.image_url = new_image.url
            listing.image_filename = new_image.filename

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating listing {listing_id}: {e}")
            if new_image is not None:
                self._discard_image(new_image.filename)
            raise PersistenceError("Failed to update listing") from e

        self.db.refresh(listing)
        logger.info(f"Listing {listing_id} updated by user {user.id}")
        return listing

    def delete(self, listing_id: int, user: User) -> None:
        """
        Удаляет объявление.

        Порядок: изображение в Cloudinary (best-effort), затем отзывы из
        списка объявления, затем само объявление. Локальная часть
        выполняется одной транзакцией; если она не удалась, удаленное
        изображение уже не восстановить.
        """
        listing = self.get_owned(listing_id, user)

        if listing.image_filename:
            self._discard_image(listing.image_filename)

        review_count = len(listing.reviews)
        try:
            for review in list(listing.reviews):
                self.db.delete(review)
            self.db.delete(listing)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting listing {listing_id}: {e}")
            raise PersistenceError("Failed to delete listing") from e

        logger.info(f"Listing {listing_id} deleted with {review_count} reviews by user {user.id}")

    def _clean_fields(self, payload: ListingPayload) -> dict:
        """Удаляет разметку и заново проверяет то, что осталось"""
        result = validate_payload(ListingPayload, {
            "title": strip_markup(payload.title),
            "description": strip_markup(payload.description),
            "price": payload.price,
            "location": strip_markup(payload.location),
            "country": strip_markup(payload.country),
        })
        if not result.ok:
            raise ValidationFailed(result.messages)
        return result.value.model_dump(exclude={"image"})

    def _locate(self, location: str, country: str):
        if self.geocoder is None:
            raise ExternalServiceError("Geocoding is not configured")
        return self.geocoder.locate(location, country)

    def _require_storage(self) -> CloudinaryImageStorage:
        if self.image_storage is None:
            raise ExternalServiceError("Image storage is not configured")
        return self.image_storage

    def _discard_image(self, filename: str) -> None:
        """Удаление изображения без проброса ошибки"""
        if self.image_storage is None:
            return
        try:
            self.image_storage.destroy(filename)
        except ExternalServiceError:
            logger.warning(f"Could not delete remote image {filename}, leaving it orphaned")
