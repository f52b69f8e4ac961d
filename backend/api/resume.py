"""Resume download notification endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from backend.api.deps import get_resume_notifier
from backend.core.exceptions import DeliveryFailedError, ResumeNotificationError
from backend.schemas.contact import ErrorResponse, ResumeDownloadResponse
from backend.services.resume import ResumeNotifier

router = APIRouter(tags=["resume"])


@router.post(
    "/download-resume",
    response_model=ResumeDownloadResponse,
    responses={500: {"model": ErrorResponse}},
)
async def download_resume(
    request: Request,
    notifier: Annotated[ResumeNotifier, Depends(get_resume_notifier)],
) -> ResumeDownloadResponse:
    """
    Record a resume download.

    Emails the site owner and returns the absolute URL of the statically
    served resume file, built from this request's scheme and host.
    """
    try:
        file_url = await notifier.handle(request.url.scheme, request.url.netloc)
    except ResumeNotificationError as e:
        raise DeliveryFailedError(str(e)) from e

    return ResumeDownloadResponse(file_url=file_url)
