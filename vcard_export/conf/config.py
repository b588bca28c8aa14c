import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from vcard_export.schemas.contact import Version

dotenv_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../.env'))


class Settings(BaseSettings):
    """
    Application settings read from the environment and the ``.env`` file.

    Every variable is prefixed with ``VCARD_``, e.g. ``VCARD_DEBUG=true``.
    """
    app_title: str = "vCard Export API"
    default_filename: str = "contact.vcf"
    content_disposition: str = "attachment"
    default_version: Version = Version.V30
    debug: bool = False

    model_config = SettingsConfigDict(env_file=dotenv_path, env_prefix="VCARD_", extra="ignore")

settings = Settings()
