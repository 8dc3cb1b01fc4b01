import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.errors import ExternalServiceError, PersistenceError, ValidationFailed
from marketplace.models import User
from marketplace.schemas import ListingPayload, validate_payload
from marketplace.services.geocoding import MapboxGeocoder, get_geocoder
from marketplace.services.image_storage import CloudinaryImageStorage, get_image_storage
from marketplace.services.listings import ListingService
from marketplace.web import flash, get_current_user, render, require_user

router = APIRouter(prefix="/listings", tags=["listings"])
logger = logging.getLogger(__name__)


def get_listing_service(
    db: Session = Depends(get_db),
    geocoder: MapboxGeocoder = Depends(get_geocoder),
    image_storage: CloudinaryImageStorage = Depends(get_image_storage),
) -> ListingService:
    return ListingService(db, geocoder=geocoder, image_storage=image_storage)


def _validated(title, description, price, location, country) -> ListingPayload:
    result = validate_payload(ListingPayload, {
        "title": title,
        "description": description,
        "price": price,
        "location": location,
        "country": country,
    })
    if not result.ok:
        raise ValidationFailed(result.messages)
    return result.value


def _uploaded_file(image: Optional[UploadFile]):
    # Браузер присылает пустую часть формы, если файл не выбран
    if image is None or not image.filename:
        return None
    return image.file


@router.get("", response_class=HTMLResponse)
def index(
    request: Request,
    page: int = Query(1),
    current_user: Optional[User] = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    """Список объявлений с пагинацией"""
    result = service.list_page(page)
    return render(
        request,
        "listings/index.html",
        all_listings=result.items,
        current_page=result.page,
        total_pages=result.pages,
        total_listings=result.total,
    )


@router.get("/new", response_class=HTMLResponse)
def new_form(request: Request, current_user: User = Depends(require_user)):
    """Форма создания объявления"""
    return render(request, "listings/new.html")


@router.post("")
def create_listing(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    location: str = Form(""),
    country: str = Form(""),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_user),
    service: ListingService = Depends(get_listing_service),
):
    """Создать объявление"""
    payload = _validated(title, description, price, location, country)
    upload = _uploaded_file(image)
    if upload is None:
        raise ValidationFailed(['"image" is required'])

    try:
        service.create(payload, upload, current_user)
    except (ExternalServiceError, PersistenceError) as e:
        logger.error(f"Error creating listing: {e}")
        flash(request, "error", "Failed to create listing")
        return RedirectResponse("/listings", status_code=303)

    flash(request, "success", "New Listing Created")
    return RedirectResponse("/listings", status_code=303)


@router.get("/{listing_id}", response_class=HTMLResponse)
def show_listing(
    request: Request,
    listing_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    """Страница объявления"""
    listing = service.get(listing_id)
    return render(request, "listings/show.html", listing=listing)


@router.get("/{listing_id}/edit", response_class=HTMLResponse)
def edit_form(
    request: Request,
    listing_id: int,
    current_user: User = Depends(require_user),
    service: ListingService = Depends(get_listing_service),
):
    """Форма редактирования (только для владельца)"""
    listing = service.get_owned(listing_id, current_user)
    return render(request, "listings/edit.html", listing=listing)


@router.put("/{listing_id}")
def update_listing(
    request: Request,
    listing_id: int,
    title: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    location: str = Form(""),
    country: str = Form(""),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_user),
    service: ListingService = Depends(get_listing_service),
):
    """Обновить объявление"""
    payload = _validated(title, description, price, location, country)

    try:
        service.update(listing_id, payload, _uploaded_file(image), current_user)
    except (ExternalServiceError, PersistenceError) as e:
        logger.error(f"Error updating listing {listing_id}: {e}")
        flash(request, "error", "Failed to update listing")
        return RedirectResponse("/listings", status_code=303)

    flash(request, "success", "Listing Updated")
    return RedirectResponse(f"/listings/{listing_id}", status_code=303)


@router.delete("/{listing_id}")
def delete_listing(
    request: Request,
    listing_id: int,
    current_user: User = Depends(require_user),
    service: ListingService = Depends(get_listing_service),
):
    """Удалить объявление вместе с отзывами и изображением"""
    try:
        service.delete(listing_id, current_user)
    except PersistenceError as e:
        logger.error(f"Error deleting listing {listing_id}: {e}")
        flash(request, "error", "Failed to delete listing")
        return RedirectResponse("/listings", status_code=303)

    flash(request, "success", "Listing deleted successfully")
    return RedirectResponse("/listings", status_code=303)
