from fastapi import APIRouter, Depends, HTTPException, Response, status

from shortlink_app.config import settings
from shortlink_app.dependencies import (
    get_current_owner,
    get_owned_url,
    get_url_service,
)
from shortlink_app.errors import MaxCollisionError
from shortlink_app.models.url import URL
from shortlink_app.schemas.url import (
    AnalyticsEntryResponse,
    AnalyticsResponse,
    URLCreate,
    URLEdit,
    URLResponse,
)
from shortlink_app.services.owner import Owner
from shortlink_app.services.url_service import URLService

router = APIRouter(prefix="/urls", tags=["urls"])


def check_custom_code(short_code: str, owner: Owner):
    """Premium owners may pick shorter aliases than everyone else"""
    if len(short_code) < owner.min_custom_code_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"short_code must be at least {owner.min_custom_code_length} characters"
        )


@router.post("/", response_model=URLResponse, status_code=status.HTTP_201_CREATED)
async def create_short_url(
    url_data: URLCreate,
    response: Response,
    owner: Owner = Depends(get_current_owner),
    url_service: URLService = Depends(get_url_service)
):
    """Create a short URL, or return the caller's existing one (200)"""
    custom_code = url_data.short_code if owner.can_choose_code else None
    if custom_code:
        check_custom_code(custom_code, owner)

    try:
        result = await url_service.create_short_url(
            str(url_data.long_url),
            owner,
            short_code=custom_code,
            redirect=url_data.redirect,
        )
    except MaxCollisionError:
        if custom_code:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Short code '{custom_code}' is already taken"
            )
        raise

    if not result.created:
        response.status_code = status.HTTP_200_OK
    return result.url


@router.get("/{short_code}", response_model=URLResponse)
async def get_url_info(url: URL = Depends(get_owned_url)):
    """Get information about one of the caller's short URLs"""
    return url


@router.patch("/{short_code}", response_model=URLResponse, status_code=status.HTTP_202_ACCEPTED)
async def edit_url(
    changes: URLEdit,
    url: URL = Depends(get_owned_url),
    owner: Owner = Depends(get_current_owner),
    url_service: URLService = Depends(get_url_service)
):
    """Change the long URL, code or redirect kind; restarts the expiry clock"""
    if changes.short_code:
        check_custom_code(changes.short_code, owner)

    return await url_service.edit_url(
        url,
        long_url=str(changes.long_url) if changes.long_url else None,
        short_code=changes.short_code,
        redirect=changes.redirect,
    )


@router.delete("/{short_code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_url(
    url: URL = Depends(get_owned_url),
    url_service: URLService = Depends(get_url_service)
):
    """Delete a short URL together with its analytics"""
    await url_service.delete_url(url.short_code)


@router.get("/{short_code}/analytics", response_model=AnalyticsResponse)
async def get_url_analytics(
    url: URL = Depends(get_owned_url),
    url_service: URLService = Depends(get_url_service)
):
    """List recorded accesses of a short URL"""
    entries = await url_service.get_analytics(url)
    return AnalyticsResponse(
        short_code=url.short_code,
        short_url=f"{settings.base_url}/{url.short_code}",
        total=len(entries),
        entries=[AnalyticsEntryResponse.model_validate(entry) for entry in entries],
    )
