"""Request bodies for the local kiosk action endpoints."""

from checkin_kiosk.models.session import Language
from checkin_kiosk.schemas.base import CamelModel


class LanguageRequest(CamelModel):
    language: Language


class RentalRequest(CamelModel):
    rental: str


class CustomerConfirmRequest(CamelModel):
    confirmed: bool


class SignAgreementRequest(CamelModel):
    """Signature as a data URL or raw base64 PNG."""

    signaturePayload: str
