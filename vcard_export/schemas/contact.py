from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from vcard_export.services.formatting import escape_value


class Version(str, Enum):
    """
    Supported vCard versions.

    Attributes:
        V30: vCard 3.0 (RFC 2426).
        V40: vCard 4.0 (RFC 6350).
    """
    V30 = "3.0"
    V40 = "4.0"

    def __str__(self) -> str:
        return self.value


class EmailType(str, Enum):
    INTERNET = "INTERNET"
    WORK = "WORK"
    HOME = "HOME"
    MOBILE = "MOBILE"


class PhoneType(str, Enum):
    VOICE = "VOICE"
    WORK = "WORK"
    HOME = "HOME"
    MOBILE = "MOBILE"
    FAX = "FAX"


class AddressType(str, Enum):
    WORK = "WORK"
    HOME = "HOME"
    POSTAL = "POSTAL"


class URLType(str, Enum):
    WORK = "WORK"
    HOME = "HOME"
    SOCIAL = "SOCIAL"


class Name(BaseModel):
    """
    Structured name of a contact.

    Attributes:
        first (str): Given name.
        last (str): Family name.
        middle (str): Additional names.
        prefix (str): Honorific prefix (Mr., Dr., ...).
        suffix (str): Honorific suffix (Jr., PhD, ...).
    """
    first: str = ""
    last: str = ""
    middle: str = ""
    prefix: str = ""
    suffix: str = ""

    def formatted_name(self) -> str:
        """
        Join the non-empty name parts with spaces.

        :return: "prefix first middle last suffix" without the empty parts.
        """
        parts = [self.prefix, self.first, self.middle, self.last, self.suffix]
        return " ".join(part for part in parts if part)

    def structured_name(self) -> str:
        """
        Render the value of the N property.

        :return: Escaped "last;first;middle;prefix;suffix".
        """
        return ";".join(
            escape_value(part)
            for part in (self.last, self.first, self.middle, self.prefix, self.suffix)
        )


class Email(BaseModel):
    address: str
    type: Optional[EmailType] = None
    preferred: bool = False


class Phone(BaseModel):
    number: str
    type: Optional[PhoneType] = None
    preferred: bool = False


class Address(BaseModel):
    """
    Postal address.

    Attributes:
        street (str): Street address.
        extended (str): Apartment, suite, etc.
        city (str): Locality.
        state (str): Region or province.
        postal_code (str): Postal code.
        country (str): Country name.
        type (Optional[AddressType]): Address type, omitted from output when unset.
        preferred (bool): Whether this is the preferred address.
    """
    street: str = ""
    extended: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    type: Optional[AddressType] = None
    preferred: bool = False

    def has_label_data(self) -> bool:
        return any([self.street, self.city, self.state, self.postal_code, self.country])

    def structured_address(self) -> str:
        """
        Render the value of the ADR property.

        The post office box component is always empty.

        :return: Escaped "pobox;extended;street;city;state;postal code;country".
        """
        return ";".join(
            [""] + [
                escape_value(part)
                for part in (
                    self.extended, self.street, self.city,
                    self.state, self.postal_code, self.country,
                )
            ]
        )

    def formatted_address(self) -> str:
        """
        Human readable, newline separated rendering used for LABEL.

        :return: Unescaped multi-line address.
        """
        parts = [part for part in (self.street, self.extended) if part]
        city_state = ", ".join(part for part in (self.city, self.state) if part)
        if city_state:
            parts.append(city_state)
        parts.extend(part for part in (self.postal_code, self.country) if part)
        return "\n".join(parts)


class Organization(BaseModel):
    name: str = ""
    department: str = ""
    title: str = ""
    role: str = ""


class URL(BaseModel):
    address: str
    type: Optional[URLType] = None
    preferred: bool = False


class ContactData(BaseModel):
    """
    Complete contact structure for batch operations and request bodies.

    Dates are parsed from "YYYY-MM-DD" strings by pydantic, so malformed
    dates are rejected when the model is built.
    """
    name: Name = Field(default_factory=Name)
    emails: List[Email] = Field(default_factory=list)
    phones: List[Phone] = Field(default_factory=list)
    addresses: List[Address] = Field(default_factory=list)
    organization: Organization = Field(default_factory=Organization)
    urls: List[URL] = Field(default_factory=list)
    photo: str = ""
    note: str = ""
    birthday: Optional[date] = None
    anniversary: Optional[date] = None
    custom_properties: Dict[str, str] = Field(default_factory=dict)
    version: Version = Version.V30
