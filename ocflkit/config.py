"""Site configuration: env-driven defaults for building and checking objects.

Settings are read from ``OCFLKIT_*`` environment variables or a ``.env``
file.  Nothing reads a global instance; each component takes an
``OcflConfig`` in its constructor and builds a default one when omitted.
"""

from __future__ import annotations

import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VERSION_FORMAT = re.compile(r"^v%0?\d*d$")


class OcflConfig(BaseSettings):
    """Site-wide OCFL settings.

    Examples
    --------
    Override via environment::

        export OCFLKIT_DIGEST_ALGORITHM=sha256
        export OCFLKIT_CONTENT_DIRECTORY=data
        export OCFLKIT_VERSION_FORMAT=v%d
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OCFLKIT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Object construction defaults
    version_format: str = "v%04d"
    content_type: str = "https://ocfl.io/1.0/spec/#inventory"
    content_directory: str = "content"
    digest_algorithm: str = "sha512"

    # Site-specific allowable fixity algorithms
    fixity_algorithms: list[str] = ["md5", "sha1", "sha256"]

    # OCFL version expected in the object root NamAsTe file
    ocfl_version: str = "1.0"

    log_level: str = "INFO"

    @field_validator("version_format")
    @classmethod
    def _check_version_format(cls, value: str) -> str:
        if not _VERSION_FORMAT.match(value):
            raise ValueError(
                f"version_format {value!r} must look like 'v%d' or 'v%04d'"
            )
        return value

    @field_validator("digest_algorithm")
    @classmethod
    def _lowercase_algorithm(cls, value: str) -> str:
        return value.lower()
