"""Contact form API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from backend.api.deps import get_contact_service
from backend.core.exceptions import ContactValidationError, DeliveryFailedError
from backend.core.rate_limit import RateLimitDependency
from backend.schemas.contact import ContactResponse, ContactSubmission, ErrorResponse
from backend.services.contact import ContactOutcome, ContactService

router = APIRouter(tags=["contact"], dependencies=[Depends(RateLimitDependency("contact"))])

CONTACT_PATHS = ("/contact", "/api/contact")


async def submit_contact_form(
    service: Annotated[ContactService, Depends(get_contact_service)],
    payload: Annotated[Any, Body()] = None,
) -> ContactResponse:
    """
    Submit a contact form.

    Valid submissions are relayed as one email to the site owner with
    Reply-To set to the submitter. Honeypot hits also get ``{"ok": true}``.
    The body is typed as ``ContactSubmission`` only after the honeypot check.
    """
    try:
        result = await service.handle_payload(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e

    if result.outcome is ContactOutcome.REJECTED:
        raise ContactValidationError(result.error)
    if result.outcome is ContactOutcome.FAILED:
        raise DeliveryFailedError(result.error)

    return ContactResponse(ok=True)


# Legacy and canonical paths share one handler
for path in CONTACT_PATHS:
    router.add_api_route(
        path,
        submit_contact_form,
        methods=["POST"],
        response_model=ContactResponse,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        openapi_extra={
            "requestBody": {
                "content": {
                    "application/json": {
                        "schema": ContactSubmission.model_json_schema(),
                    },
                },
            },
        },
    )
