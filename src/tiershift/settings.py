"""Console settings resolved from CLI flags and the environment.

Precedence: explicit override (CLI flag) > environment variable > default.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tiershift.result import Result
from tiershift.status import DEFAULT_STATUS_CAPACITY
from tiershift.validation import validate_model


DEFAULT_REGION = "us-east-1"
DEFAULT_POLICY_FILE = Path("~/.config/tiershift/policies.jsonl")


class ConsoleSettings(BaseModel):
    """Validated runtime configuration.

    Attributes
    ----------
    endpoint_url
        Custom S3 endpoint (MinIO, LocalStack); ``None`` uses AWS.
    region
        Region used for the client session.
    profile
        Named AWS profile, if any.
    policy_file
        JSON Lines file holding saved policies.
    status_capacity
        Number of status lines retained by the console.
    connect_timeout, read_timeout
        botocore socket timeouts in seconds.
    max_attempts
        botocore retry budget per request.
    """

    endpoint_url: str | None = None
    region: str = Field(default=DEFAULT_REGION, min_length=1)
    profile: str | None = None
    policy_file: Path = DEFAULT_POLICY_FILE
    status_capacity: int = Field(default=DEFAULT_STATUS_CAPACITY, gt=0)
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def resolved_policy_file(self) -> Path:
        return self.policy_file.expanduser()


def _environment() -> dict[str, object]:
    values: dict[str, object] = {}
    if endpoint := os.environ.get("AWS_ENDPOINT_URL"):
        values["endpoint_url"] = endpoint
    if region := os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION"):
        values["region"] = region
    if profile := os.environ.get("AWS_PROFILE"):
        values["profile"] = profile
    if policy_file := os.environ.get("TIERSHIFT_POLICY_FILE"):
        values["policy_file"] = policy_file
    if capacity := os.environ.get("TIERSHIFT_STATUS_CAPACITY"):
        values["status_capacity"] = capacity
    return values


def load_settings(**overrides: object) -> Result[ConsoleSettings, ValidationError]:
    """Build settings from the environment, with non-``None`` overrides winning."""
    values = _environment()
    values.update({name: value for name, value in overrides.items() if value is not None})
    return validate_model(ConsoleSettings, **values)
