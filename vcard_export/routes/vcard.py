from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Response, status
import logging

from vcard_export.conf.config import settings
from vcard_export.schemas.contact import ContactData, EmailType, PhoneType, URLType
from vcard_export.schemas.vcard import VCardData, VCardJSONResponse, VCardRequest
from vcard_export.services.errors import ValidationError, VCardError
from vcard_export.services.vcard import VCard

router = APIRouter(prefix="/vcard", tags=["vcard"])

logger = logging.getLogger(__name__)

VCARD_MEDIA_TYPE = "text/vcard; charset=utf-8"

_EMAIL_TYPES = {"home": EmailType.HOME, "mobile": EmailType.MOBILE}
_PHONE_TYPES = {"home": PhoneType.HOME, "mobile": PhoneType.MOBILE, "fax": PhoneType.FAX}
_URL_TYPES = {"home": URLType.HOME, "social": URLType.SOCIAL}


def vcard_filename(card: VCard, default: Optional[str] = None) -> str:
    """
    Derive a download filename from the card's formatted name.

    :param card: The card being downloaded.
    :param default: Filename used when the card has no formatted name.
    :return: e.g. "john-doe.vcf".
    """
    formatted_name = card.get_formatted_name()
    if not formatted_name:
        return default or settings.default_filename
    return formatted_name.lower().replace(" ", "-") + ".vcf"


def content_disposition(disposition: str, filename: str) -> str:
    """
    Build a Content-Disposition header value that is safe to send as latin-1.

    Non-ASCII characters, quotes and backslashes are replaced with "_" in the
    plain ``filename`` parameter. When that changes the name, the exact name is
    added as an RFC 5987 ``filename*`` parameter.

    :param disposition: "attachment" or "inline".
    :param filename: Download filename.
    :return: e.g. 'attachment; filename="john-doe.vcf"'.
    """
    fallback = "".join(
        char if " " <= char <= "~" and char not in '"\\' else "_"
        for char in filename
    )
    value = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _validate_or_400(card: VCard):
    try:
        card.validate()
    except ValidationError as e:
        logger.warning(f"Rejected invalid vCard: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid vCard: {e}")


def _serialize_or_500(card: VCard) -> str:
    try:
        return card.serialize()
    except VCardError as e:
        logger.error(f"Error generating vCard content: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate vCard content: {e}"
        )


def vcard_response(card: VCard, filename: Optional[str] = None, disposition: Optional[str] = None) -> Response:
    """
    Build a downloadable vCard response.

    :param card: Card to send.
    :param filename: Download filename. Derived from the name when omitted; ".vcf" is appended if missing.
    :param disposition: "attachment" or "inline". Defaults to the configured value.
    :return: A text/vcard response.
    :raises HTTPException: 400 if the card is invalid, 500 if serialization fails.
    """
    _validate_or_400(card)

    filename = filename or vcard_filename(card)
    if not filename.lower().endswith(".vcf"):
        filename += ".vcf"
    disposition = disposition or settings.content_disposition

    content = _serialize_or_500(card)
    return Response(
        content=content,
        media_type=VCARD_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(disposition, filename)},
    )


def from_request(request: VCardRequest, version=None) -> VCard:
    """
    Build a card from flat request fields.

    Type names are matched case-insensitively; unknown or missing ones fall back to WORK.

    :param request: Flat contact fields.
    :param version: vCard version, the configured default when omitted.
    :return: The new card. It is not validated here.
    """
    card = VCard(version=version or settings.default_version)

    if request.first_name:
        card.add_name(request.first_name, request.last_name)

    if request.email:
        card.add_email(request.email, _EMAIL_TYPES.get(request.email_type.lower(), EmailType.WORK))

    if request.phone:
        card.add_phone(request.phone, _PHONE_TYPES.get(request.phone_type.lower(), PhoneType.WORK))

    if request.organization:
        card.add_organization(request.organization)
        if request.department:
            card.add_department(request.department)
        if request.title:
            card.add_title(request.title)
        if request.role:
            card.add_role(request.role)

    if request.url:
        card.add_url(request.url, _URL_TYPES.get(request.url_type.lower(), URLType.WORK))

    if request.note:
        card.add_note(request.note)

    return card


def _from_contact(contact: ContactData) -> VCard:
    return VCard(version=contact.version).add_contact(contact)


@router.post("/", response_class=Response)
async def download_vcard(contact: ContactData):
    """
    Convert a full contact into a vCard download.

    :param contact: ContactData schema.
    :return: text/vcard attachment.
    """
    return vcard_response(_from_contact(contact))


@router.post("/form", response_class=Response)
async def download_vcard_from_form(request: VCardRequest):
    """
    Convert flat contact fields into a vCard download.

    :param request: VCardRequest schema.
    :return: text/vcard attachment.
    """
    return vcard_response(from_request(request))


@router.post("/json", response_model=VCardJSONResponse)
async def vcard_json(contact: ContactData):
    """
    Return the serialized vCard together with its structured data.

    :param contact: ContactData schema.
    :return: VCardJSONResponse.
    """
    card = _from_contact(contact)
    _validate_or_400(card)
    content = _serialize_or_500(card)
    data = card.to_contact_data()
    return VCardJSONResponse(
        vcard=content,
        data=VCardData(**data.model_dump(exclude={"version"})),
    )
