"""Pydantic schemas for API requests.

Request fields are optional at the schema level: services validate presence
so the API returns its documented messages ("Email and password are
required", ...) rather than generic validation output. Request bodies
accept camelCase aliases or snake_case names.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# /api/auth
# ============================================================================


class SignupRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    company_name: Optional[str] = Field(default=None, alias="companyName")
    invite_token: Optional[str] = Field(default=None, alias="inviteToken")


class SigninRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SignoutRequest(RequestModel):
    session_token: Optional[str] = Field(default=None, alias="sessionToken")


# ============================================================================
# /api/companies
# ============================================================================


class CompanyCreateRequest(RequestModel):
    name: Optional[str] = None
    website_url: Optional[str] = Field(default=None, alias="websiteUrl")


class CompanyUpdateRequest(RequestModel):
    name: Optional[str] = None
    website_url: Optional[str] = Field(default=None, alias="websiteUrl")


class InviteMemberRequest(RequestModel):
    email: Optional[str] = None
    company_role: Optional[str] = Field(default=None, alias="companyRole")


class UpdateMemberRequest(RequestModel):
    name: Optional[str] = None
    company_role: Optional[str] = Field(default=None, alias="companyRole")


class OnboardingUpdateRequest(RequestModel):
    state: Any = None
    completed: Optional[bool] = None


class CompanyDataRequest(RequestModel):
    data: Any = None


# ============================================================================
# /api/companies/{id}/verification
# ============================================================================


class VerificationSettingsRequest(RequestModel):
    sender_email: Optional[str] = Field(default=None, alias="senderEmail")
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    is_verified: Optional[bool] = Field(default=None, alias="isVerified")


class SenderCreateRequest(RequestModel):
    email: Optional[str] = None
    name: Optional[str] = None
    update_mode: bool = Field(default=False, alias="updateMode")


class OtpValidateRequest(RequestModel):
    otp: Any = None
    email: Optional[str] = None
    name: Optional[str] = None


class StepCompleteRequest(RequestModel):
    step: Any = None


class DomainRequest(RequestModel):
    domain: Optional[str] = None


class EmailTemplateRequest(RequestModel):
    email_template: Any = Field(default=None, alias="emailTemplate")


# ============================================================================
# /api/invite, /api/contact
# ============================================================================


class AcceptInvitationRequest(RequestModel):
    token: Optional[str] = None


class ContactRequest(RequestModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
