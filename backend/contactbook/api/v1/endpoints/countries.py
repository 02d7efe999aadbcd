"""
Country dial codes for the phone field.
"""

from fastapi import APIRouter, HTTPException, Query, status

from contactbook.data.countries import (
    COUNTRIES,
    get_country_by_code,
    get_country_by_dial_code,
    get_default_country,
)
from contactbook.schemas.common import CountryResponse

router = APIRouter(prefix="/countries", tags=["countries"])


@router.get("", response_model=list[CountryResponse])
async def list_countries():
    return [CountryResponse.model_validate(c) for c in COUNTRIES]


@router.get("/default", response_model=CountryResponse)
async def default_country():
    return CountryResponse.model_validate(get_default_country())


@router.get("/lookup", response_model=CountryResponse)
async def lookup_country(
    dial_code: str | None = Query(None, description="e.g. +44"),
    code: str | None = Query(None, description="Two-letter country code, e.g. GB"),
):
    """Find a country by dial code or by two-letter code."""
    if dial_code:
        country = get_country_by_dial_code(dial_code)
    elif code:
        country = get_country_by_code(code)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Pass dial_code or code",
        )
    if country is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Country not found",
        )
    return CountryResponse.model_validate(country)
