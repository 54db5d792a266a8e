from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from shortlink_app.dependencies import get_url_service
from shortlink_app.services.url_service import URLService

router = APIRouter(tags=["redirect"])


@router.get("/{short_code}")
async def redirect_to_long_url(
    short_code: str,
    request: Request,
    url_service: URLService = Depends(get_url_service)
):
    """
    Redirect to the original URL.

    307 for temporary links, 308 for permanent ones. Unknown codes are 404,
    expired links 410 (via the exception handlers in main.py).
    """
    resolution = await url_service.resolve(
        short_code,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    resolution.raise_for_status()

    return RedirectResponse(
        url=resolution.long_form,
        status_code=resolution.redirect_kind.status_code
    )
