"""
vCard builder and encoder.

A :class:`VCard` collects contact data through chainable setters and renders
it as vCard 3.0 or 4.0 text::

    card = VCard().add_name("John", "Doe").add_email("john.doe@example.com")
    text = card.serialize()

Instances are mutable and not thread-safe; callers sharing one across threads
must lock around it.
"""
import base64
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from vcard_export.schemas.contact import (
    URL,
    Address,
    AddressType,
    ContactData,
    Email,
    EmailType,
    Name,
    Organization,
    Phone,
    PhoneType,
    URLType,
    Version,
)
from vcard_export.services.errors import FormatError, ValidationError, VCardIOError
from vcard_export.services.formatting import (
    LINE_ENDING,
    escape_value,
    fold_line,
    format_type_parameter,
)

__all__ = ["VCard"]

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def _coerce_version(version: Union[Version, str]) -> Version:
    try:
        return Version(version)
    except ValueError as e:
        raise FormatError(f"Unsupported vCard version: {version!r}") from e


def _coerce_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise FormatError(f"Expected a date, got {type(value).__name__}: {value!r}")
    return value


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise FormatError(f"Invalid date format: {value!r}, expected YYYY-MM-DD") from e


def _preference(preferred: bool) -> str:
    return ";PREF=1" if preferred else ""


class VCard:
    """
    In-memory contact that serializes to vCard text.

    Every setter mutates the instance and returns it so calls can be chained.
    Use :meth:`clone` to get an independent copy.
    """

    def __init__(self, version: Union[Version, str] = Version.V30):
        self._version = _coerce_version(version)
        self._name = Name()
        self._emails: List[Email] = []
        self._phones: List[Phone] = []
        self._addresses: List[Address] = []
        self._organization = Organization()
        self._urls: List[URL] = []
        self._photo = ""
        self._note = ""
        self._birthday: Optional[date] = None
        self._anniversary: Optional[date] = None
        self._custom_properties: Dict[str, str] = {}

    @classmethod
    def with_version(cls, version: Union[Version, str]) -> "VCard":
        return cls(version=version)

    def __repr__(self) -> str:
        return f"<VCard version={self._version.value} name={self.get_formatted_name()!r}>"

    # Version

    def set_version(self, version: Union[Version, str]) -> "VCard":
        self._version = _coerce_version(version)
        return self

    def get_version(self) -> Version:
        return self._version

    # Name

    def add_name(self, first: str, last: str) -> "VCard":
        self._name.first = first
        self._name.last = last
        return self

    def add_middle_name(self, middle: str) -> "VCard":
        self._name.middle = middle
        return self

    def add_prefix(self, prefix: str) -> "VCard":
        self._name.prefix = prefix
        return self

    def add_suffix(self, suffix: str) -> "VCard":
        self._name.suffix = suffix
        return self

    def set_name(self, name: Name) -> "VCard":
        self._name = name.model_copy()
        return self

    # Email

    def add_email(self, address: str, email_type: Optional[EmailType] = EmailType.INTERNET) -> "VCard":
        self._emails.append(Email(address=address, type=email_type))
        return self

    def add_email_with_preference(
        self, address: str, email_type: Optional[EmailType], preferred: bool
    ) -> "VCard":
        self._emails.append(Email(address=address, type=email_type, preferred=preferred))
        return self

    def add_emails(self, emails: List[Email]) -> "VCard":
        self._emails.extend(email.model_copy() for email in emails)
        return self

    # Phone

    def add_phone(self, number: str, phone_type: Optional[PhoneType] = PhoneType.VOICE) -> "VCard":
        self._phones.append(Phone(number=number, type=phone_type))
        return self

    def add_phone_with_preference(
        self, number: str, phone_type: Optional[PhoneType], preferred: bool
    ) -> "VCard":
        self._phones.append(Phone(number=number, type=phone_type, preferred=preferred))
        return self

    def add_phones(self, phones: List[Phone]) -> "VCard":
        self._phones.extend(phone.model_copy() for phone in phones)
        return self

    # Address

    def add_address(
        self,
        street: str,
        city: str,
        state: str,
        postal_code: str,
        country: str,
        address_type: Optional[AddressType] = None,
    ) -> "VCard":
        return self.add_address_extended(street, "", city, state, postal_code, country, address_type)

    def add_address_extended(
        self,
        street: str,
        extended: str,
        city: str,
        state: str,
        postal_code: str,
        country: str,
        address_type: Optional[AddressType] = None,
    ) -> "VCard":
        self._addresses.append(
            Address(
                street=street,
                extended=extended,
                city=city,
                state=state,
                postal_code=postal_code,
                country=country,
                type=address_type,
            )
        )
        return self

    def add_address_with_preference(
        self,
        street: str,
        city: str,
        state: str,
        postal_code: str,
        country: str,
        address_type: Optional[AddressType],
        preferred: bool,
    ) -> "VCard":
        self._addresses.append(
            Address(
                street=street,
                city=city,
                state=state,
                postal_code=postal_code,
                country=country,
                type=address_type,
                preferred=preferred,
            )
        )
        return self

    def add_addresses(self, addresses: List[Address]) -> "VCard":
        self._addresses.extend(address.model_copy() for address in addresses)
        return self

    # Organization

    def add_organization(self, name: str) -> "VCard":
        self._organization.name = name
        return self

    def add_department(self, department: str) -> "VCard":
        self._organization.department = department
        return self

    def add_title(self, title: str) -> "VCard":
        self._organization.title = title
        return self

    def add_role(self, role: str) -> "VCard":
        self._organization.role = role
        return self

    def set_organization(self, organization: Organization) -> "VCard":
        self._organization = organization.model_copy()
        return self

    # URL

    def add_url(self, address: str, url_type: Optional[URLType] = None) -> "VCard":
        self._urls.append(URL(address=address, type=url_type))
        return self

    def add_url_with_preference(self, address: str, url_type: Optional[URLType], preferred: bool) -> "VCard":
        self._urls.append(URL(address=address, type=url_type, preferred=preferred))
        return self

    def add_urls(self, urls: List[URL]) -> "VCard":
        self._urls.extend(url.model_copy() for url in urls)
        return self

    # Photo, note, dates

    def add_photo(self, photo: str) -> "VCard":
        """
        Set the photo.

        The value may be an http(s) URL, a ``data:`` URI or raw base64 JPEG
        data. The kind is detected from its prefix at serialization time.
        """
        self._photo = photo
        return self

    def add_photo_from_file(self, path) -> "VCard":
        """
        Load an image file and store it as a base64 ``data:`` URI.

        :param path: Path of the image file.
        :return: This card.
        :raises VCardIOError: If the file cannot be read.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise VCardIOError(f"Failed to read photo file {path}: {e}") from e
        self._photo = "data:image/jpeg;base64," + base64.b64encode(data).decode("ascii")
        return self

    def add_note(self, note: str) -> "VCard":
        self._note = note
        return self

    def add_birthday(self, birthday: Union[date, datetime]) -> "VCard":
        self._birthday = _coerce_date(birthday)
        return self

    def add_birthday_from_string(self, value: str) -> "VCard":
        self._birthday = _parse_date(value)
        return self

    def add_anniversary(self, anniversary: Union[date, datetime]) -> "VCard":
        """Set the anniversary. It is only written for vCard 4.0."""
        self._anniversary = _coerce_date(anniversary)
        return self

    def add_anniversary_from_string(self, value: str) -> "VCard":
        self._anniversary = _parse_date(value)
        return self

    # Custom properties

    def add_custom_property(self, name: str, value: str) -> "VCard":
        """
        Store a custom property.

        Only names starting with ``X-`` (any case) are written out. Properties
        are emitted in insertion order.
        """
        self._custom_properties[name] = value
        return self

    def add_custom_properties(self, properties: Dict[str, str]) -> "VCard":
        self._custom_properties.update(properties)
        return self

    # Batch

    def add_contact(self, contact: ContactData) -> "VCard":
        """
        Apply every field of a :class:`ContactData` to this card.

        Sequences are appended, the name replaces the current one, the
        organization is replaced only when it has a name, and the remaining
        optional fields are set when present.

        :param contact: Contact data to copy in.
        :return: This card.
        """
        self.set_name(contact.name)
        self.add_emails(contact.emails)
        self.add_phones(contact.phones)
        self.add_addresses(contact.addresses)
        if contact.organization.name:
            self.set_organization(contact.organization)
        self.add_urls(contact.urls)
        if contact.photo:
            self.add_photo(contact.photo)
        if contact.note:
            self.add_note(contact.note)
        if contact.birthday is not None:
            self.add_birthday(contact.birthday)
        if contact.anniversary is not None:
            self.add_anniversary(contact.anniversary)
        self.add_custom_properties(contact.custom_properties)
        return self

    # Accessors

    def get_name(self) -> Name:
        return self._name.model_copy()

    def get_formatted_name(self) -> str:
        return self._name.formatted_name()

    def get_emails(self) -> List[Email]:
        return [email.model_copy() for email in self._emails]

    def get_email(self) -> str:
        return self._emails[0].address if self._emails else ""

    def get_phones(self) -> List[Phone]:
        return [phone.model_copy() for phone in self._phones]

    def get_phone(self) -> str:
        return self._phones[0].number if self._phones else ""

    def get_addresses(self) -> List[Address]:
        return [address.model_copy() for address in self._addresses]

    def get_address(self) -> Optional[Address]:
        return self._addresses[0].model_copy() if self._addresses else None

    def get_organization(self) -> Organization:
        return self._organization.model_copy()

    def get_urls(self) -> List[URL]:
        return [url.model_copy() for url in self._urls]

    def get_url(self) -> str:
        return self._urls[0].address if self._urls else ""

    def get_photo(self) -> str:
        return self._photo

    def get_note(self) -> str:
        return self._note

    def get_birthday(self) -> Optional[date]:
        return self._birthday

    def get_anniversary(self) -> Optional[date]:
        return self._anniversary

    def get_custom_properties(self) -> Dict[str, str]:
        return dict(self._custom_properties)

    def get_custom_property(self, name: str) -> str:
        return self._custom_properties.get(name, "")

    def to_contact_data(self) -> ContactData:
        """Snapshot the card as a :class:`ContactData` model."""
        return ContactData(
            name=self.get_name(),
            emails=self.get_emails(),
            phones=self.get_phones(),
            addresses=self.get_addresses(),
            organization=self.get_organization(),
            urls=self.get_urls(),
            photo=self._photo,
            note=self._note,
            birthday=self._birthday,
            anniversary=self._anniversary,
            custom_properties=self.get_custom_properties(),
            version=self._version,
        )

    # Lifecycle

    def clone(self) -> "VCard":
        """
        Deep copy the card.

        :return: A new card sharing no mutable state with this one.
        """
        card = VCard(version=self._version)
        card._name = self._name.model_copy()
        card._emails = self.get_emails()
        card._phones = self.get_phones()
        card._addresses = self.get_addresses()
        card._organization = self._organization.model_copy()
        card._urls = self.get_urls()
        card._photo = self._photo
        card._note = self._note
        card._birthday = self._birthday
        card._anniversary = self._anniversary
        card._custom_properties = dict(self._custom_properties)
        return card

    def reset(self) -> "VCard":
        """Clear every field in place and go back to version 3.0."""
        self.__init__()
        return self

    # Validation

    def validate(self) -> None:
        """
        Check the required fields.

        Email and URL syntax and empty addresses or URLs are not checked.

        :raises ValidationError: If both first and last name are empty, or an
            email address or phone number is empty.
        """
        if not self._name.first and not self._name.last:
            raise ValidationError("vcard must have at least first name or last name")
        for email in self._emails:
            if not email.address:
                raise ValidationError("email address cannot be empty")
        for phone in self._phones:
            if not phone.number:
                raise ValidationError("phone number cannot be empty")

    def is_valid(self) -> bool:
        try:
            self.validate()
        except ValidationError:
            return False
        return True

    # Serialization

    def serialize(self) -> str:
        """
        Render the card as vCard text.

        :return: Text from ``BEGIN:VCARD`` to ``END:VCARD``, each line ending
            with ``\\n`` and long lines folded at 75 characters.
        :raises ValidationError: If :meth:`validate` fails. No text is produced.
        """
        self.validate()

        lines = ["BEGIN:VCARD", f"VERSION:{self._version.value}"]
        lines.extend(self._name_lines())
        lines.extend(self._email_lines())
        lines.extend(self._phone_lines())
        lines.extend(self._address_lines())
        lines.extend(self._organization_lines())
        lines.extend(self._url_lines())
        lines.extend(self._photo_lines())
        if self._note:
            lines.append(f"NOTE:{escape_value(self._note)}")
        if self._birthday is not None:
            lines.append(f"BDAY:{self._birthday.strftime(DATE_FORMAT)}")
        if self._anniversary is not None and self._version == Version.V40:
            lines.append(f"ANNIVERSARY:{self._anniversary.strftime(DATE_FORMAT)}")
        lines.extend(self._custom_lines())
        lines.append("END:VCARD")

        logger.debug("Serialized vCard %s with %d lines", self._version.value, len(lines))
        return "".join(fold_line(line) + LINE_ENDING for line in lines)

    def serialize_bytes(self) -> bytes:
        return self.serialize().encode("utf-8")

    def write_to_file(self, path) -> None:
        """
        Serialize the card and write it to ``path``, replacing any existing file.

        :param path: Destination path.
        :raises ValidationError: If the card is invalid. The file is not touched.
        :raises VCardIOError: If writing fails.
        """
        content = self.serialize_bytes()
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise VCardIOError(f"Failed to write vCard to {path}: {e}") from e
        logger.debug("Wrote vCard to %s", path)

    def _name_lines(self):
        yield f"N:{self._name.structured_name()}"

        formatted_name = self._name.formatted_name()
        if not formatted_name:
            if self._name.last and self._name.first:
                formatted_name = f"{self._name.last}, {self._name.first}"
            else:
                formatted_name = self._name.first or self._name.last
        if formatted_name:
            yield f"FN:{escape_value(formatted_name)}"

    def _email_lines(self):
        for email in self._emails:
            params = format_type_parameter(email.type or EmailType.INTERNET) + _preference(email.preferred)
            yield f"EMAIL{params}:{escape_value(email.address)}"

    def _phone_lines(self):
        for phone in self._phones:
            params = format_type_parameter(phone.type or PhoneType.VOICE) + _preference(phone.preferred)
            yield f"TEL{params}:{escape_value(phone.number)}"

    def _address_lines(self):
        for address in self._addresses:
            params = format_type_parameter(address.type) + _preference(address.preferred)
            yield f"ADR{params}:{address.structured_address()}"
            if address.has_label_data():
                yield f"LABEL{params}:{escape_value(address.formatted_address())}"

    def _organization_lines(self):
        org = self._organization
        if org.name:
            parts = [escape_value(org.name)]
            if org.department:
                parts.append(escape_value(org.department))
            yield f"ORG:{';'.join(parts)}"
        if org.title:
            yield f"TITLE:{escape_value(org.title)}"
        if org.role:
            yield f"ROLE:{escape_value(org.role)}"

    def _url_lines(self):
        for url in self._urls:
            params = format_type_parameter(url.type) + _preference(url.preferred)
            yield f"URL{params}:{escape_value(url.address)}"

    def _photo_lines(self):
        photo = self._photo
        if not photo:
            return
        if photo.startswith(("http://", "https://")):
            yield f"PHOTO;VALUE=uri:{photo}"
        elif photo.startswith("data:"):
            yield f"PHOTO;ENCODING=b:{photo}"
        else:
            yield f"PHOTO;ENCODING=b;TYPE=JPEG:{photo}"

    def _custom_lines(self):
        for name, value in self._custom_properties.items():
            if name.upper().startswith("X-") and value:
                yield f"{name.upper()}:{escape_value(value)}"
