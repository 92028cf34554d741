"""
Pydantic schemas for the admin email dispatch endpoint.
"""

from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, Dict, Any


class EmailDispatchRequest(BaseModel):
    """
    Either a named template with its context, or a raw subject and HTML body.
    """

    to: EmailStr
    template: Optional[str] = Field(None, description="Template name", examples=["property_approval"])
    context: Dict[str, Any] = Field(default_factory=dict, description="Template variables")
    subject: Optional[str] = Field(None, max_length=255)
    html: Optional[str] = None

    @model_validator(mode="after")
    def template_or_body(self):
        if not self.template and not (self.subject and self.html):
            raise ValueError("Provide a template name or both subject and html")
        return self


class EmailDispatchResponse(BaseModel):
    success: bool
    sent: bool
    message: Optional[str] = None
