"""Property store location settings.

Settings are loaded from environment variables with the ``PROPSTORE_``
prefix and validated with Pydantic. They supply the defaults used when
``PropertyStore.configure()`` is called without arguments, or when an
accessor triggers lazy configuration.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NAMESPACE = "propstore"
DEFAULT_FILE_NAME = "properties.json"


class StoreSettings(BaseSettings):
    """Where the property file lives.

    Environment Variables:
        PROPSTORE_NAMESPACE: Directory name under ``~/.config``
            (default: propstore)
        PROPSTORE_BASE_DIR: Explicit directory, overrides the namespace
            default of ``~/.config/<namespace>``
        PROPSTORE_FILE_NAME: File name inside the directory
            (default: properties.json)

    Example:
        >>> settings = StoreSettings(namespace="myapp")
        >>> settings.base_dir.parts[-2:]
        ('.config', 'myapp')
        >>> settings.properties_path.name
        'properties.json'
    """

    model_config = SettingsConfigDict(
        env_prefix="PROPSTORE_",
        extra="ignore",
    )

    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        description="Directory name under ~/.config",
    )
    base_dir: Path | None = Field(
        default=None,
        description="Directory holding the property file (default: ~/.config/<namespace>)",
    )
    file_name: str = Field(
        default=DEFAULT_FILE_NAME,
        description="Property file name",
    )

    @field_validator("namespace", "file_name")
    @classmethod
    def _reject_path_separators(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            msg = f"'{v}' must be a plain name without path separators"
            raise ValueError(msg)
        return v

    @field_validator("file_name")
    @classmethod
    def _require_json_suffix(cls, v: str) -> str:
        if not v.endswith(".json"):
            msg = "file_name must end with '.json'"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def _resolve_base_dir(self) -> StoreSettings:
        if self.base_dir is None:
            self.base_dir = Path.home() / ".config" / self.namespace
        else:
            self.base_dir = self.base_dir.expanduser()
        return self

    @property
    def properties_path(self) -> Path:
        """Full path of the property file."""
        assert self.base_dir is not None
        return self.base_dir / self.file_name


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Get cached StoreSettings instance.

    Clear cache with ``get_store_settings.cache_clear()`` for testing.
    """
    return StoreSettings()
