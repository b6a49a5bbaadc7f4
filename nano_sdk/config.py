"""SDK configuration.

Only the wallet and node client are configurable; the encoding and
signing core takes its inputs explicitly.
"""

from __future__ import annotations

import os
from typing import Annotated, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nano_sdk.identity import check_address
from nano_sdk.types import AccountPrefix, AddressCheckResult

DEFAULT_NODE_URL = "http://localhost:7076"

_ENV_FIELDS = {
    "NANO_NODE_URL": "node_url",
    "NANO_TIMEOUT": "timeout",
    "NANO_PREFIX": "prefix",
    "NANO_REPRESENTATIVE": "representative",
}


class NanoConfig(BaseModel):
    """Settings for talking to a node and creating accounts."""

    model_config = ConfigDict(frozen=True)

    node_url: str = DEFAULT_NODE_URL
    timeout: Annotated[float, Field(gt=0, description="Request timeout in seconds")] = 15.0
    prefix: AccountPrefix = AccountPrefix.NANO
    representative: str | None = None

    @field_validator("representative")
    @classmethod
    def _check_representative(cls, v: str | None) -> str | None:
        if v is not None:
            result = check_address(v)
            if result is not AddressCheckResult.VALID:
                raise ValueError(f"representative is not a valid address ({result.value})")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "NanoConfig":
        """Build a config from ``NANO_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            pydantic.ValidationError: If a variable has an invalid value.
        """
        env = os.environ if environ is None else environ
        values = {field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)}
        return cls.model_validate(values)
