"""
Pydantic models for configuration validation.

Provides schema validation and type checking for appdrop-cli configuration files.
"""

import os
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from .exceptions import ConfigurationError


SCHEMA_VERSION = 1


def _duplicates(names: List[str]) -> set:
    lowered = [n.lower() for n in names]
    return {n for n in names if lowered.count(n.lower()) > 1}


class HostConfig(BaseModel):
    """Configuration for a target host."""
    model_config = ConfigDict(extra='forbid')

    name: str = Field(..., min_length=1, description="Host name as reachable on the network")
    root: Optional[str] = Field(None, description="App root on this host (defaults to app_root)")
    description: str = Field("", description="Free-form note")

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Host name must not be blank")
        return v


class AppConfig(BaseModel):
    """Executable spec for one deployable application."""
    model_config = ConfigDict(extra='forbid')

    name: str = Field(..., min_length=1, description="Application name")
    executable: str = Field(..., min_length=1, description="Executable file name or glob (packaged products)")
    sub_folder: str = Field("", description="Folder under the build that holds the executable")
    product_group: Optional[str] = Field(None, description="Staging subtree (defaults to name)")
    product_requires_environment: bool = Field(False, description="Builds live under environment folders")
    environment_in_shortcut: bool = Field(False, description="Environment goes into shortcut arguments")

    @field_validator('sub_folder', mode='before')
    @classmethod
    def normalize_sub_folder(cls, v):
        """Normalize sub_folder: None -> '', strip separators."""
        if v is None:
            return ""
        return str(v).strip().strip("/\\")


class ScanConfig(BaseModel):
    """Host availability scanner settings."""
    model_config = ConfigDict(extra='forbid')

    concurrency: int = Field(6, ge=1, description="Maximum probes in flight")
    ping_timeout_ms: int = Field(800, ge=1, description="Per-probe ping deadline")
    interval_seconds: int = Field(0, ge=0, description="Periodic rescan interval (0 disables)")


class AppdropConfig(BaseModel):
    """Root configuration for an appdrop-cli project."""
    model_config = ConfigDict(extra='forbid')

    version: Literal[1] = Field(..., description="Config schema version")
    staging_root: str = Field(..., min_length=1, description="Staging repository root")

    app_root: str = Field('CSTApps', description="Default app root on target hosts")
    share_template: str = Field('\\\\{host}\\C$', description="Admin share path for a host")
    local_drive: str = Field('C:', description="Drive the admin share exposes")
    environments: List[str] = Field(default_factory=list, description="Environment names")
    shortcut_arguments: str = Field(
        '-Configuration {environment} -Mode {environment}',
        description="Launch arguments for apps that embed the environment"
    )

    apps: List[AppConfig] = Field(default_factory=list, description="App executable specs")
    hosts: List[HostConfig] = Field(default_factory=list, description="Target hosts")
    scan: ScanConfig = Field(default_factory=ScanConfig, description="Scanner settings")

    @field_validator('apps', mode='before')
    @classmethod
    def reject_mapping_shape(cls, v):
        """The app list has exactly one shape: a list of objects."""
        if isinstance(v, dict):
            raise ValueError(
                "'apps' must be a list of {name, executable, ...} entries; "
                "the name -> executable mapping shape is not supported"
            )
        return v

    @field_validator('environments', mode='before')
    @classmethod
    def normalize_environments(cls, v):
        """Accept a comma-separated string; drop blanks and duplicates."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(',')
        seen = []
        for env in v:
            env = str(env).strip()
            if env and env.lower() not in [s.lower() for s in seen]:
                seen.append(env)
        return seen

    @field_validator('share_template')
    @classmethod
    def validate_share_template(cls, v):
        if '{host}' not in v:
            raise ValueError("share_template must contain a '{host}' placeholder")
        return v

    @field_validator('apps')
    @classmethod
    def validate_unique_app_names(cls, v):
        """Ensure app names are unique (case-insensitive)."""
        dupes = _duplicates([a.name for a in v])
        if dupes:
            raise ValueError(f"App names must be unique. Duplicates: {dupes}")
        return v

    @field_validator('hosts')
    @classmethod
    def validate_unique_host_names(cls, v):
        """Ensure host names are unique (case-insensitive)."""
        dupes = _duplicates([h.name for h in v])
        if dupes:
            raise ValueError(f"Host names must be unique. Duplicates: {dupes}")
        return v

    @model_validator(mode='after')
    def validate_shortcut_arguments(self):
        if any(a.environment_in_shortcut for a in self.apps) and '{environment}' not in self.shortcut_arguments:
            raise ValueError(
                "shortcut_arguments must contain '{environment}' when an app sets environment_in_shortcut"
            )
        return self


def _format_pydantic_errors(exc) -> List[str]:
    errors = []
    for error in exc.errors():
        loc = " -> ".join(str(l) for l in error['loc'])
        msg = error['msg']
        errors.append(f"{loc}: {msg}" if loc else msg)
    return errors


class ConfigValidator:
    """Validator for appdrop configuration with filesystem checks."""

    def __init__(self, project_root: str):
        self.project_root = os.path.abspath(project_root)

    def _load_yaml(self, config_path: str) -> dict:
        import yaml

        if not os.path.isfile(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a mapping at the top level")
        return data

    def resolve_staging_root(self, config: AppdropConfig) -> str:
        """Relative staging roots are taken relative to the project root."""
        return os.path.normpath(os.path.join(self.project_root, config.staging_root))

    def validate_config_file(self, config_path: str) -> AppdropConfig:
        """
        Validate config file and return parsed configuration.

        Raises:
            ConfigurationError: If config is invalid (includes all validation errors)
            FileNotFoundError: If config file doesn't exist
        """
        from pydantic import ValidationError as PydanticValidationError

        data = self._load_yaml(config_path)
        try:
            return AppdropConfig(**data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Configuration validation failed",
                context={"errors": _format_pydantic_errors(e)}
            )

    def validate_paths(self, config: AppdropConfig) -> tuple[List[str], List[str]]:
        """
        Check the staging tree the config points at.

        Returns:
            Tuple of (errors, warnings)
        """
        errors = []
        warnings = []

        staging = self.resolve_staging_root(config)
        if not os.path.isdir(staging):
            errors.append(f"staging_root not found: {config.staging_root} (absolute: {staging})")
            return errors, warnings

        for app in config.apps:
            group = app.product_group or app.name
            if not os.path.isdir(os.path.join(staging, group)):
                warnings.append(f"App '{app.name}' product group folder missing: {group}")
            if app.product_requires_environment and not config.environments:
                warnings.append(f"App '{app.name}' requires an environment but no environments are configured")

        if not config.hosts:
            warnings.append("No hosts configured")

        return errors, warnings

    def validate_all(self, config_path: str) -> tuple[AppdropConfig, List[str]]:
        """
        Run all validation checks, collecting ALL errors before raising.

        Returns:
            Tuple of (validated_config, warnings)

        Raises:
            ConfigurationError: With all validation errors collected
        """
        from pydantic import ValidationError as PydanticValidationError

        data = self._load_yaml(config_path)

        try:
            config = AppdropConfig(**data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Configuration validation failed",
                context={"errors": _format_pydantic_errors(e)}
            )

        errors, warnings = self.validate_paths(config)
        if errors:
            raise ConfigurationError(
                "Configuration validation failed",
                context={"errors": errors}
            )

        return config, warnings
