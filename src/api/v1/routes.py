"""
API v1 routes.

Defines REST endpoints for account registration and activation:
- POST /v1/users - Register a disabled account and send the activation email
- POST /v1/users/token/{token} - Activate the account holding the token

Domain calls run in the threadpool: registration hashes the password
with bcrypt, and every repository/mailer call is blocking I/O.
"""

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.api.dependencies import get_language, get_registration_service, get_translator
from src.api.models import MessageResponse, RegisterRequest, ValidationErrorResponse
from src.domain.exceptions import EmailDeliveryError, InvalidTokenError, ValidationError
from src.domain.registration import RegistrationService
from src.domain.validation import RegistrationCandidate
from src.i18n import Translator

router = APIRouter(tags=["v1"])


@router.post(
    "/users",
    response_model=MessageResponse,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        502: {"model": MessageResponse, "description": "Activation email could not be sent"},
    },
    summary="Register a new user",
    description="Submit username, email and password to create a disabled account. "
    "An activation link is sent to the provided email.",
)
async def register(
    request_data: RegisterRequest,
    language: str = Depends(get_language),
    translator: Translator = Depends(get_translator),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse | JSONResponse:
    """
    Register a new user and send the activation email.

    - **username**: 4 to 32 characters
    - **email**: Valid, unused email address
    - **password**: At least 6 characters with upper case, lower case and a digit

    Any other body field (e.g. an enabled flag) is ignored.
    """
    candidate = RegistrationCandidate(
        username=request_data.username,
        email=request_data.email,
        password=request_data.password,
    )
    try:
        await run_in_threadpool(service.register, candidate)
    except ValidationError as e:
        body = ValidationErrorResponse(
            message=translator.translate("validation_failure", language),
            validation_errors={
                field: translator.translate(code.value, language)
                for field, code in e.errors.items()
            },
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=body.model_dump(by_alias=True),
        )
    except EmailDeliveryError:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"message": translator.translate("email_failure", language)},
        )
    return MessageResponse(message=translator.translate("user_create_success", language))


@router.post(
    "/users/token/{token}",
    response_model=MessageResponse,
    responses={
        400: {"model": MessageResponse, "description": "Invalid token or account already active"},
    },
    summary="Activate account with activation token",
    description="Submit the token from the activation email to enable the account.",
)
async def activate(
    token: str,
    language: str = Depends(get_language),
    translator: Translator = Depends(get_translator),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse | JSONResponse:
    """
    Activate account with activation token.

    Unknown tokens and already-used tokens get the same response.
    """
    try:
        await run_in_threadpool(service.activate, token)
    except InvalidTokenError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": translator.translate("account_activation_failure", language)},
        )
    return MessageResponse(message=translator.translate("account_activation_success", language))
