# Area: Shared
"""
rps_dapp._runner_config — Runner Configuration
==============================================

Configuration model, validation and environment mappings for
RpsClientRunner.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("rps_dapp")

# Required config keys (may come from env vars, see ENV_MAPPINGS)
REQUIRED_CONFIG_KEYS = [
    "rpc_url",
    "contract_address",
    "abi_path",
]

# Environment variable → config key
ENV_MAPPINGS = {
    "RPS_RPC_URL": "rpc_url",
    "RPS_CONTRACT_ADDRESS": "contract_address",
    "RPS_ABI_PATH": "abi_path",
    "RPS_FROM_BLOCK": "from_block",
    "RPS_ACCOUNT_POLL_INTERVAL": "account_poll_interval",
    "RPS_EVENT_POLL_INTERVAL": "event_poll_interval",
    "RPS_RECONNECT_DELAY": "reconnect_delay",
    "RPS_LOG_FILE": "log_file",
    "RPS_LOG_LEVEL": "log_level",
}


class ClientConfig(BaseModel):
    """Validated client configuration."""
    model_config = ConfigDict(extra="ignore")

    rpc_url: str
    contract_address: str
    abi_path: str
    from_block: int = Field(0, ge=0)
    account_poll_interval: float = Field(0.1, gt=0)   # seconds
    event_poll_interval: float = Field(1.0, gt=0)     # seconds
    reconnect_delay: float = Field(2.0, ge=0)         # seconds
    history_window: int = Field(7, ge=1)
    secret_length: int = Field(16, ge=16)
    cursor_retain_blocks: Optional[int] = Field(256, ge=1)
    log_file: str = "rps_dapp.log"
    log_level: str = "INFO"

    @field_validator("contract_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        text = value.strip()
        if not (text.startswith("0x") and len(text) == 42):
            raise ValueError(f"not a 20-byte hex address: {value!r}")
        int(text, 16)
        return text

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value!r}")
        return level


def validate_config(config: Dict[str, Any]) -> ClientConfig:
    """
    Validate a raw configuration dict.

    Args:
        config: Configuration dict

    Returns:
        The validated ClientConfig

    Raises:
        ValueError: If required keys are missing or a value is invalid
    """
    missing = [k for k in REQUIRED_CONFIG_KEYS if not config.get(k)]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")
    try:
        return ClientConfig.model_validate(config)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}") from e
