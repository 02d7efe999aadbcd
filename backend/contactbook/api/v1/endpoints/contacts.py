"""
Contacts endpoints (Supabase contacts table, scoped to the signed-in user).
List with search/sort, validate, create, update, delete, and photo upload.
"""

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from contactbook.core.notifications import Notifier, get_notifier
from contactbook.core.security import get_current_user
from contactbook.models.session import AuthUser
from contactbook.schemas.common import MessageResponse
from contactbook.schemas.contact import (
    Contact,
    ContactCreate,
    ContactListResponse,
    ContactUpdate,
    ContactValidationResponse,
    PhotoUploadResponse,
)
from contactbook.services.contact_rules import (
    SortOption,
    cycle_sort_option,
    filter_and_sort,
    sort_label,
    validate_contact,
)
from contactbook.services.contacts_service import ContactsService, get_contacts_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get(
    "",
    response_model=ContactListResponse,
    summary="List contacts",
    description="Contacts of the current user, filtered by `search` and ordered by `sort`.",
)
async def list_contacts(
    search: str = Query("", description="Matches name, email, phone or company"),
    sort: SortOption = Query(SortOption.NAME_ASC, description="name-asc, name-desc, date-asc or date-desc"),
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
) -> ContactListResponse:
    """GET /api/v1/contacts: fetch (or reuse the cached list), then filter and sort for display."""
    all_contacts = await contacts.list()
    return ContactListResponse(
        contacts=[Contact.model_validate(c) for c in filter_and_sort(all_contacts, search, sort)],
        total=len(all_contacts),
        search=search,
        sort=sort,
        sort_label=sort_label(sort),
        next_sort=cycle_sort_option(sort),
    )


@router.post(
    "/validate",
    response_model=ContactValidationResponse,
    summary="Validate a contact draft",
)
async def validate_draft(body: ContactCreate) -> ContactValidationResponse:
    """Field errors for a draft; used to show inline errors while typing."""
    errors = validate_contact(body.model_dump())
    return ContactValidationResponse(errors=errors, submittable=not errors)


@router.post(
    "",
    response_model=Contact,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
)
async def create_contact(
    body: ContactCreate,
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
) -> Contact:
    created = await contacts.add(body.model_dump())
    logger.info("Contact %s created for user %s", created.id, current_user.id)
    return Contact.model_validate(created)


@router.post(
    "/photo",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload contact photo",
)
async def upload_contact_photo(
    file: UploadFile = File(...),
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
) -> PhotoUploadResponse:
    """Store an image (max 5MB) and return its public URL for photo_url."""
    data = await file.read()
    url = await contacts.upload_photo(file.filename, file.content_type, data)
    return PhotoUploadResponse(url=url)


@router.patch(
    "/{contact_id}",
    response_model=Contact,
    summary="Update contact",
)
async def update_contact(
    contact_id: str,
    body: ContactUpdate,
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
) -> Contact:
    """Only fields present in the body are changed."""
    updated = await contacts.update(contact_id, body.model_dump(exclude_unset=True))
    return Contact.model_validate(updated)


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    summary="Delete contact",
)
async def delete_contact(
    contact_id: str,
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
    notifier: Notifier = Depends(get_notifier),
) -> MessageResponse:
    await contacts.delete(contact_id)
    logger.info("Contact %s deleted for user %s", contact_id, current_user.id)
    return MessageResponse(message=notifier.last.description)


@router.delete(
    "/{contact_id}/photo",
    response_model=Contact,
    summary="Remove contact photo",
)
async def remove_contact_photo(
    contact_id: str,
    current_user: AuthUser = Depends(get_current_user),
    contacts: ContactsService = Depends(get_contacts_service),
) -> Contact:
    updated = await contacts.remove_photo(contact_id)
    return Contact.model_validate(updated)
