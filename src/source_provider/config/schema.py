"""Pydantic models for source provider configuration."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from source_provider.core.provider import SourceProvider
from source_provider.utils.paths import expand_path


class SettingsConfig(BaseModel):
    """Global settings for the source provider."""

    workspace_dir: str = Field(
        default="~/.cache/source-provider",
        description="Directory fetched sources are cached in",
    )
    target_dirs: list[str] = Field(
        default=["build/sources"],
        description="Directories that 'sync' materializes sources into",
    )
    registry_url: str = Field(
        default="https://static.crates.io/crates",
        description="Base URL registry archives are downloaded from",
    )
    user_agent: str = Field(
        default="source-provider", description="User-Agent for registry downloads"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Registry request timeout in seconds"
    )
    git_executable: str = Field(default="git", description="git binary to run")


class SourceConfig(BaseModel):
    """A named source: a registry package, a git repository or a local path."""

    registry: Optional[str] = Field(
        default=None, description="Registry package name (requires version)"
    )
    version: Optional[str] = Field(
        default=None, description="Exact package version (registry sources only)"
    )
    git: Optional[str] = Field(default=None, description="Repository clone URL")
    path: Optional[str] = Field(default=None, description="Local directory")

    @model_validator(mode="after")
    def validate_origin(self) -> "SourceConfig":
        """Validate that exactly one of registry/git/path is provided."""
        origins = [self.registry, self.git, self.path]
        if len([o for o in origins if o is not None]) != 1:
            raise ValueError("Exactly one of registry, git, or path must be provided")

        if self.registry is not None and not self.version:
            raise ValueError("version required when using registry")
        if self.registry is None and self.version is not None:
            raise ValueError("version is only allowed with registry")
        return self

    def to_provider(self) -> SourceProvider:
        """Build the SourceProvider this entry describes."""
        if self.registry is not None:
            return SourceProvider.from_registry(self.registry, self.version)
        if self.git is not None:
            return SourceProvider.from_repository(self.git)
        return SourceProvider.from_local_directory(expand_path(self.path))


class SourceProviderConfig(BaseModel):
    """Root configuration for the source provider."""

    version: str = Field(description="Config schema version")
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    sources: dict[str, SourceConfig] = Field(
        default_factory=dict, description="Named sources"
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        if not v.startswith("1."):
            raise ValueError(
                f"Unsupported config version: {v}. Only version 1.x is supported."
            )
        return v

    @field_validator("sources")
    @classmethod
    def validate_source_names(cls, v: dict[str, SourceConfig]) -> dict[str, SourceConfig]:
        """Source names become directory names, so they must be plain."""
        for name in v:
            if not name or "/" in name or "\\" in name or name in (".", ".."):
                raise ValueError(f"Invalid source name: {name!r}")
        return v
