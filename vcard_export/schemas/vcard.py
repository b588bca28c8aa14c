from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from vcard_export.schemas.contact import URL, Address, Email, Name, Organization, Phone


class VCardRequest(BaseModel):
    """
    Flat, form-like description of a contact.

    Attributes:
        first_name (str): Given name.
        last_name (str): Family name.
        email (Optional[str]): Email address.
        email_type (str): "work", "home" or "mobile". Defaults to "work".
        phone (Optional[str]): Phone number.
        phone_type (str): "work", "home", "mobile" or "fax". Defaults to "work".
        organization (Optional[str]): Organization name. Department, title and
            role are only used together with it.
        url (Optional[str]): Website.
        url_type (str): "work", "home" or "social". Defaults to "work".
        note (Optional[str]): Free text note.
    """
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    email_type: str = "work"
    phone: Optional[str] = None
    phone_type: str = "work"
    organization: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    role: Optional[str] = None
    url: Optional[str] = None
    url_type: str = "work"
    note: Optional[str] = None


class VCardData(BaseModel):
    name: Name
    emails: List[Email]
    phones: List[Phone]
    addresses: List[Address]
    organization: Organization
    urls: List[URL]
    photo: str
    birthday: Optional[date] = None
    anniversary: Optional[date] = None
    note: str
    custom_properties: Dict[str, Any]


class VCardJSONResponse(BaseModel):
    """
    JSON rendering of a card.

    Attributes:
        vcard (str): Serialized vCard text.
        data (VCardData): Structured fields of the card.
    """
    vcard: str
    data: VCardData
