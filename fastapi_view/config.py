import codecs
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderOptions(BaseModel):
    """Global options forwarded to every render call.

    ``use_html_minifier`` is any callable with the signature
    ``minify(html: str, **options) -> str`` (e.g. ``minify_html.minify``).
    """

    helpers: dict[str, Callable[..., Any]] = Field(
        default_factory=dict, description="Functions exposed to templates, may be coroutines"
    )
    partials: dict[str, str] = Field(
        default_factory=dict, description="Partial name -> path relative to the template root"
    )
    use_html_minifier: Callable[..., str] | None = Field(default=None, description="HTML minification function")
    html_minifier_options: dict[str, Any] = Field(default_factory=dict, description="Keyword options for the minifier")
    paths_to_exclude_html_minifier: list[str] = Field(
        default_factory=list, description="Request paths whose templates are never minified"
    )


class ViewSettings(BaseSettings):
    """View rendering settings with validation.

    Values come from keyword arguments, ``VIEW_*`` environment variables or
    a ``.env`` file. Helpers and the minifier can only be given in code.
    """

    charset: str = Field(default="utf-8", min_length=1, description="Template and response charset")
    property_name: str = Field(default="view", description="Name the render capability is exposed under")
    root: Path | None = Field(default=None, description="Template root directory")
    templates: Path = Field(default=Path("./"), description="Template directory used when root is unset")
    default_context: dict[str, Any] = Field(default_factory=dict, description="Base render context")
    layout: str | None = Field(default=None, description="Global layout template")
    options: RenderOptions = Field(default_factory=RenderOptions)

    model_config = SettingsConfigDict(
        env_prefix="VIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @property
    def templates_dir(self) -> Path:
        """Absolute template root: ``root`` if set, otherwise ``templates``."""
        return self.root if self.root is not None else self.templates.resolve()

    @property
    def content_type(self) -> str:
        return f"text/html; charset={self.charset}"

    @field_validator("charset", mode="after")
    @classmethod
    def validate_charset(cls, v: str) -> str:
        """Ensure charset names a known codec."""
        v = v.strip()
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"charset must be a known encoding: {e}") from e
        return v

    @field_validator("property_name", mode="after")
    @classmethod
    def validate_property_name(cls, v: str) -> str:
        """Ensure property_name can be used as an attribute name."""
        v = v.strip()
        if not v.isidentifier():
            raise ValueError(f"property_name must be a valid identifier, got {v!r}")
        return v

    @field_validator("root", mode="after")
    @classmethod
    def resolve_root(cls, v: Path | None) -> Path | None:
        return v.resolve() if v is not None else None

    @field_validator("layout", mode="after")
    @classmethod
    def empty_layout_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


# Singleton settings instance
_settings_instance: ViewSettings | None = None


def get_settings() -> ViewSettings:
    """Get singleton ViewSettings instance.

    Used by ``setup_views`` when no settings are passed, so the environment
    and ``.env`` file are read once per process.

    Returns:
        Cached ViewSettings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ViewSettings()
    return _settings_instance
