"""
Admin email dispatch endpoint.
"""

from fastapi import APIRouter, Depends

from app.models.user import User
from app.services.email_templates import TEMPLATES
from app.services.notification import NotificationService
from app.schemas.notification import EmailDispatchRequest, EmailDispatchResponse
from app.schemas.error import get_error_responses
from app.utils.dependencies import get_current_admin_user, get_notification_service
from app.utils.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post(
    "/email",
    response_model=EmailDispatchResponse,
    summary="Send an email",
    description=(
        "Send a named template with its context, or a raw subject and HTML body. "
        "Delivery failures are reported with sent=false rather than an error."
    ),
    responses=get_error_responses(401, 403, 422)
)
async def send_email(
    request: EmailDispatchRequest,
    admin: User = Depends(get_current_admin_user),
    notifier: NotificationService = Depends(get_notification_service)
) -> EmailDispatchResponse:
    if request.template:
        if request.template not in TEMPLATES:
            raise ValidationError(
                f"Unknown email template: {request.template}",
                field_errors=[{"field": "template", "message": f"Must be one of: {', '.join(sorted(TEMPLATES))}"}]
            )
        sent = await notifier.send_template(request.to, request.template, **request.context)
    else:
        sent = await notifier.send_email(request.to, request.subject, request.html)

    logger.info(f"Email dispatch by {admin.email}: to={request.to} template={request.template} sent={sent}")
    return EmailDispatchResponse(
        success=True,
        sent=sent,
        message="Email sent" if sent else "Email could not be delivered"
    )
