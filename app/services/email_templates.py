"""
Transactional email templates.
Each builder returns an EmailContent with a subject and an HTML body.
"""

from html import escape
from typing import Any, Callable, Dict, NamedTuple, Optional
from app.config import settings
from app.utils.country import get_country_info
from app.utils.currency import format_gyd


class EmailContent(NamedTuple):
    subject: str
    html: str


def _text(value: Any) -> str:
    """HTML-escape a context value; None renders as an empty string."""
    return escape("" if value is None else str(value))


def _wrap(heading: str, body: str, color: str = "#2563eb") -> str:
    """Shared layout with heading, body and support footer."""
    whatsapp_digits = "".join(ch for ch in settings.support_whatsapp if ch.isdigit())
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<h2 style="color: {color};">{heading}</h2>'
        f"{body}"
        f'<p>Questions? Contact us on WhatsApp: <a href="https://wa.me/{whatsapp_digits}">{_text(settings.support_whatsapp)}</a></p>'
        '<p style="font-size: 12px; color: #9ca3af;">Portal Home Hub</p>'
        "</div>"
    )


def _site_name(country_id: Optional[str]) -> str:
    return f"{get_country_info(country_id).get('name', 'Portal')} HomeHub"


def _reason_block(reason: Optional[str]) -> str:
    if not reason:
        return ""
    return (
        '<div style="background: #fef2f2; border-left: 4px solid #dc2626; padding: 12px; margin: 16px 0;">'
        f"<strong>Reason:</strong> {_text(reason)}</div>"
    )


def agent_application_received(first_name: str, **_: Any) -> EmailContent:
    body = (
        f"<p>Hi {_text(first_name)},</p>"
        "<p>Thank you for applying to become an agent on Portal Home Hub.</p>"
        "<p><strong>Application Status: Under Review</strong></p>"
        "<p>Our team will review your application within 24-48 hours. "
        "You'll receive an email once a decision has been made.</p>"
    )
    return EmailContent("Agent Application Received - Portal Home Hub", _wrap("Application Received", body))


def agent_admin_notification(
    agent_name: str,
    agent_email: str,
    country_id: str = "GY",
    company_name: Optional[str] = None,
    license_number: Optional[str] = None,
    application_id: Optional[str] = None,
    **_: Any
) -> EmailContent:
    body = (
        "<p>A new agent application has been submitted.</p>"
        f"<p><strong>Name:</strong> {_text(agent_name)}<br>"
        f"<strong>Email:</strong> {_text(agent_email)}<br>"
        f"<strong>Country:</strong> {_text(country_id)}<br>"
        f"<strong>Company:</strong> {_text(company_name or 'Not provided')}<br>"
        f"<strong>License:</strong> {_text(license_number or 'Not provided')}<br>"
        f"<strong>Application ID:</strong> {_text(application_id or '')}</p>"
        f'<p><a href="{settings.frontend_url}/admin-dashboard/agents">Review in Admin Dashboard</a></p>'
    )
    return EmailContent(f"New Agent Application: {agent_name}", _wrap("New Agent Application", body))


def agent_approval(first_name: str, country_id: str = "GY", **_: Any) -> EmailContent:
    site = _site_name(country_id)
    body = (
        f"<p>Hi {_text(first_name)},</p>"
        f"<p>Congratulations! Your agent application on {site} has been approved.</p>"
        "<p>You can now log in and start listing properties.</p>"
        f'<p><a href="{settings.frontend_url}/login">Log In Now</a></p>'
    )
    return EmailContent(f"You're Approved! Welcome to {site}", _wrap("Application Approved", body, "#16a34a"))


def agent_rejection(first_name: str, reason: Optional[str] = None, **_: Any) -> EmailContent:
    body = (
        f"<p>Hi {_text(first_name)},</p>"
        "<p>After reviewing your agent application, we are unable to approve it at this time.</p>"
        f"{_reason_block(reason)}"
        "<p>You can update your application with corrections and resubmit it from your dashboard.</p>"
    )
    return EmailContent("Agent Application Update - Portal Home Hub", _wrap("Application Update", body, "#dc2626"))


def agent_resubmission_notification(
    agent_name: str,
    agent_email: str,
    country_id: str = "GY",
    previous_rejection_reason: Optional[str] = None,
    application_id: Optional[str] = None,
    **_: Any
) -> EmailContent:
    body = (
        "<p>Hello Admin Team,</p>"
        "<p>A previously rejected agent has resubmitted their application with corrections.</p>"
        f"<p><strong>Name:</strong> {_text(agent_name)}<br>"
        f"<strong>Email:</strong> {_text(agent_email)}<br>"
        f"<strong>Country:</strong> {_text(country_id or 'GY')}<br>"
        f"<strong>Application ID:</strong> {_text(application_id or '')}</p>"
        "<p><strong>Previous Rejection Reason:</strong><br>"
        f"{_text(previous_rejection_reason or 'No specific reason recorded')}</p>"
        '<p>The application has been moved back to "Pending Review".</p>'
    )
    return EmailContent(f"Agent Resubmission: {agent_name}", _wrap("Agent Application - Resubmission Received", body, "#0ea5e9"))


def _user_type_label(user_type: str) -> str:
    return "Landlord" if user_type == "landlord" else "Property Owner"


def owner_approval(first_name: str, user_type: str = "owner", country_id: str = "GY", **_: Any) -> EmailContent:
    site = _site_name(country_id)
    listing_noun = "rental properties" if user_type == "landlord" else "property"
    body = (
        f"<p>Hi {_text(first_name)},</p>"
        f"<p>Great news! Your <strong>{_user_type_label(user_type)}</strong> account on {site} has been approved.</p>"
        f"<p>You can now log in and start listing your {listing_noun}!</p>"
        "<ol><li>Log in to your account</li>"
        "<li>Click \"Create Listing\" from your dashboard</li>"
        "<li>Add your property details and photos</li></ol>"
        f'<p><a href="{settings.frontend_url}/login">Log In Now</a></p>'
    )
    return EmailContent(f"You're Approved! Start Listing on {site}", _wrap("You're Approved!", body, "#22c55e"))


def owner_rejection(
    first_name: str,
    user_type: str = "owner",
    reason: Optional[str] = None,
    country_id: str = "GY",
    **_: Any
) -> EmailContent:
    site = _site_name(country_id)
    body = (
        f"<p>Hi {_text(first_name)},</p>"
        f"<p>Thank you for your interest in {site}. After reviewing your {_user_type_label(user_type)} "
        "application, we are unable to approve your account at this time.</p>"
        f"{_reason_block(reason or 'Your application did not meet our platform requirements.')}"
        "<p>If you believe this decision was made in error, please reply with any additional information.</p>"
    )
    return EmailContent(f"Application Update - {site}", _wrap("Application Update", body, "#1e3a5f"))


def property_approval(property_title: str, property_id: Optional[str] = None, **_: Any) -> EmailContent:
    link = f"{settings.frontend_url}/property/{property_id}" if property_id else settings.frontend_url
    body = (
        f'<p>Great news! Your property listing <b>"{_text(property_title)}"</b> has been approved and is now live!</p>'
        f'<p><a href="{link}">View Your Live Listing</a></p>'
    )
    return EmailContent("Your property listing is now live!", _wrap("Property Approved!", body, "#16a34a"))


def property_rejection(property_title: str, reason: Optional[str] = None, **_: Any) -> EmailContent:
    body = (
        f'<p>Your property listing <b>"{_text(property_title)}"</b> was not approved at this time.</p>'
        f"{_reason_block(reason)}"
        "<p>Please review and update your listing, then resubmit for approval.</p>"
    )
    return EmailContent(f'Your property "{property_title}" needs attention', _wrap("Property Review Required", body, "#dc2626"))


def welcome(first_name: Optional[str] = None, **_: Any) -> EmailContent:
    greeting = f"<p>Hi {_text(first_name)},</p>" if first_name else ""
    body = (
        f"{greeting}"
        "<p><strong>Application Status: Under Review</strong></p>"
        "<p>Our team will review your application within 24-48 hours. You'll receive an email once approved.</p>"
        "<p>Thank you for signing up! Once your application is approved, you'll be able to log in "
        "and start listing your property.</p>"
    )
    return EmailContent("Welcome to Portal Home Hub - Application Received!", _wrap("Welcome to Portal Home Hub!", body))


def payment_confirmation(
    amount_gyd: Optional[int] = None,
    reference_code: Optional[str] = None,
    plan_type: Optional[str] = None,
    **_: Any
) -> EmailContent:
    details = ""
    if amount_gyd is not None:
        details += f"<p><strong>Amount:</strong> {format_gyd(amount_gyd)}</p>"
    if reference_code:
        details += f"<p><strong>Reference:</strong> {_text(reference_code)}</p>"
    if plan_type:
        details += f"<p><strong>Plan:</strong> {_text(plan_type)}</p>"
    body = (
        "<p>Your payment was successful and your subscription is now active.</p>"
        f"{details}"
        f'<p><a href="{settings.frontend_url}/dashboard">Go to your dashboard</a></p>'
        "<p>Thank you for your business!</p>"
    )
    return EmailContent("Payment Confirmation - Portal Home Hub", _wrap("Payment Received", body, "#16a34a"))


TEMPLATES: Dict[str, Callable[..., EmailContent]] = {
    "agent_application_received": agent_application_received,
    "agent_admin_notification": agent_admin_notification,
    "agent_approval": agent_approval,
    "agent_rejection": agent_rejection,
    "agent_resubmission_notification": agent_resubmission_notification,
    "owner_approval": owner_approval,
    "owner_rejection": owner_rejection,
    "property_approval": property_approval,
    "property_rejection": property_rejection,
    "welcome": welcome,
    "payment_confirmation": payment_confirmation,
}


def render_template(name: str, context: Dict[str, Any]) -> EmailContent:
    """
    Render a named template.

    Raises:
        KeyError: If the template name is unknown
        TypeError: If a required context value is missing
    """
    return TEMPLATES[name](**context)
