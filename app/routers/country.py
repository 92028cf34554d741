"""
Country selection endpoints. The choice is kept in the country cookie.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.config import settings
from app.schemas.country import CountrySelectRequest, CountryResponse
from app.schemas.error import get_error_responses
from app.utils.country import get_country_info, is_supported_country
from app.utils.dependencies import get_request_country
from app.utils.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/country", tags=["Country"])


def _country_response(country_code: str) -> CountryResponse:
    info = get_country_info(country_code)
    return CountryResponse(
        country_code=country_code,
        name=info["name"],
        currency=info["currency"],
        symbol=info["symbol"],
        supported_countries=list(settings.supported_countries)
    )


@router.get(
    "",
    response_model=CountryResponse,
    summary="Current country",
    description="Country resolved from the query parameter, cookie or hostname"
)
async def get_country(country_code: str = Depends(get_request_country)) -> CountryResponse:
    return _country_response(country_code)


@router.post(
    "",
    response_model=CountryResponse,
    summary="Select country",
    description="Stores the selected country in a cookie for one year",
    responses=get_error_responses(422)
)
async def select_country(request: CountrySelectRequest) -> JSONResponse:
    if not is_supported_country(request.country_code):
        raise ValidationError(
            f"Unsupported country: {request.country_code}",
            field_errors=[{
                "field": "country_code",
                "message": f"Must be one of: {', '.join(settings.supported_countries)}"
            }]
        )

    response = JSONResponse(content=_country_response(request.country_code).model_dump())
    response.set_cookie(
        key=settings.country_cookie_name,
        value=request.country_code,
        max_age=settings.country_cookie_max_age,
        samesite="lax",
        secure=settings.is_production,
        path="/"
    )
    logger.info(f"Country selected: {request.country_code}")
    return response
