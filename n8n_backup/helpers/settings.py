"""
Pydantic settings models for n8n-backup.

Type-safe, validated view of the INI configuration. Built by
Config.to_settings() once at startup and passed to the cores.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_COUNT_PATTERN,
    DEFAULT_CREDENTIALS_PATH,
    DEFAULT_DOCKER_USER,
    DEFAULT_N8N_COMMAND,
    DEFAULT_NAME_FILTER,
    DEFAULT_SMTP_PORT,
    DEFAULT_SUBJECT_PREFIX,
    DEFAULT_WORKFLOWS_PATH,
    FILES_DIR_NAME,
    LOGS_DIR_NAME,
    WEBHOOK_TIMEOUT,
)


class ContainerSettings(BaseModel):
    """Which containers to back up"""

    manual: List[str] = Field(default_factory=list, description="Always included, in this order")
    auto_detect: bool = Field(default=True, description="Add running containers matching name_filter")
    name_filter: str = Field(default=DEFAULT_NAME_FILTER, description="Case-insensitive substring")

    @field_validator("manual", mode="before")
    @classmethod
    def split_manual(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [part for part in re.split(r"[,\s]+", v) if part]
        return [part for part in v if part]


class PathSettings(BaseModel):
    """Host-side directory layout"""

    base_dir: Path = Field(default_factory=Path.cwd)
    files_dir_name: str = FILES_DIR_NAME
    logs_dir_name: str = LOGS_DIR_NAME

    @field_validator("base_dir", mode="before")
    @classmethod
    def expand_base_dir(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return Path.cwd()
        return Path(v).expanduser()

    @property
    def files_dir(self) -> Path:
        return self.base_dir / self.files_dir_name

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / self.logs_dir_name


class ExportSettings(BaseModel):
    """In-container export settings"""

    workflows_path: str = DEFAULT_WORKFLOWS_PATH
    credentials_path: str = DEFAULT_CREDENTIALS_PATH
    docker_user: str = DEFAULT_DOCKER_USER
    n8n_command: str = DEFAULT_N8N_COMMAND
    count_pattern: str = DEFAULT_COUNT_PATTERN

    @field_validator("count_pattern")
    @classmethod
    def validate_count_pattern(cls, v: str) -> str:
        try:
            compiled = re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid count_pattern: {e}")
        if compiled.groups < 1:
            raise ValueError("count_pattern needs one capturing group for the number")
        return v

    @field_validator("workflows_path", "credentials_path")
    @classmethod
    def validate_container_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"In-container path must be absolute: {v}")
        if v.rstrip("/") in ("", "/tmp"):
            raise ValueError(f"Refusing to use {v} as export directory (it is removed after export)")
        return v


class EncryptionSettings(BaseModel):
    enabled: bool = True
    prompt_for_password: bool = True
    default_password: str = ""


class EmailSettings(BaseModel):
    """SMTP notification settings"""

    enabled: bool = False
    smtp_host: str = ""
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_tls: bool = True
    from_address: str = ""
    recipients: str = ""
    subject_prefix: str = DEFAULT_SUBJECT_PREFIX

    @field_validator("smtp_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"smtp_port out of range (1-65535): {v}")
        return v

    @model_validator(mode="after")
    def require_host_when_enabled(self) -> "EmailSettings":
        if self.enabled and not self.smtp_host:
            raise ValueError("email is enabled but smtp_host is empty")
        return self


class WebhookSettings(BaseModel):
    enabled: bool = False
    url: str = ""
    timeout: int = WEBHOOK_TIMEOUT
    report_actual_status: bool = False

    @model_validator(mode="after")
    def require_url_when_enabled(self) -> "WebhookSettings":
        if self.enabled and not self.url:
            raise ValueError("webhook is enabled but url is empty")
        if self.url and not self.url.startswith(("http://", "https://")):
            raise ValueError(f"webhook url must be http(s): {self.url}")
        return self


class DockerSettings(BaseModel):
    command_timeout: int = Field(default=0, ge=0, description="Seconds, 0 = no timeout")

    @property
    def timeout(self) -> Optional[int]:
        return self.command_timeout or None


class BackupSettings(BaseModel):
    """Complete, validated n8n-backup configuration"""

    containers: ContainerSettings = Field(default_factory=ContainerSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    docker: DockerSettings = Field(default_factory=DockerSettings)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Invalid log level: {v}")
        return level
