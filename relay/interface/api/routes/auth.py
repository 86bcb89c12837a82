"""Authentication routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from relay.application.usecase.auth import (
    BeginLoginUseCase,
    CompleteLoginRequest,
    CompleteLoginUseCase,
)
from relay.config import Settings
from relay.domain.error import AuthFlowError
from relay.util.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

# Carry cookie is only ever needed by /auth/* routes
CARRY_COOKIE_PATH = "/auth"


class ErrorResponse(BaseModel):
    """Error body for failed login and callback requests."""

    error: str


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def _clear_carry_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.auth.carry_cookie_name,
        path=CARRY_COOKIE_PATH,
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )


def _single_or_many(values: list[str]) -> str | list[str] | None:
    """Collapse repeated query parameters: none -> None, one -> str."""
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


@router.get(
    "/login",
    status_code=status.HTTP_302_FOUND,
    responses={500: {"model": ErrorResponse}},
)
async def login(
    begin_login_use_case: FromDishka[BeginLoginUseCase],
    settings: FromDishka[Settings],
) -> Response:
    """Start the OAuth flow and redirect the browser to Airtable.

    Sets an HttpOnly carry cookie binding the pending state and PKCE verifier
    to this browser for five minutes.

    Example:
        GET /auth/login

        Redirects to: https://airtable.com/oauth2/v1/authorize?client_id=...
        Sets cookie: relay_carry
    """
    try:
        result = await begin_login_use_case.execute()
    except Exception:
        logger.exception("Failed to initiate login")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to initiate login"
        )

    response = RedirectResponse(
        url=result.authorization_url, status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        key=settings.auth.carry_cookie_name,
        value=result.session_id,
        max_age=result.max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path=CARRY_COOKIE_PATH,
    )
    return response


@router.get(
    "/callback",
    status_code=status.HTTP_302_FOUND,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def callback(
    request: Request,
    complete_login_use_case: FromDishka[CompleteLoginUseCase],
    settings: FromDishka[Settings],
) -> Response:
    """Handle the Airtable redirect and complete login.

    Validates state and PKCE material, exchanges the code for tokens,
    stores the identity and redirects to the client dashboard.

    Example:
        GET /auth/callback?code=abc123&state=xyz789

        Redirects to: {client_url}/dashboard?token=...&userId=...
        On failure: 400/403/500 with {"error": "..."}
    """
    params = request.query_params
    login_request = CompleteLoginRequest(
        code=_single_or_many(params.getlist("code")),
        state=_single_or_many(params.getlist("state")),
        error=params.get("error"),
        error_description=params.get("error_description"),
        session_id=request.cookies.get(settings.auth.carry_cookie_name),
    )

    response: Response
    try:
        result = await complete_login_use_case.execute(login_request)
        response = RedirectResponse(
            url=result.redirect_url, status_code=status.HTTP_302_FOUND
        )
    except AuthFlowError as e:
        response = _error_response(e.status_code, e.public_message)
    except Exception:
        logger.exception("Unexpected error during OAuth callback")
        response = _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Authentication failed"
        )

    _clear_carry_cookie(response, settings)
    return response
