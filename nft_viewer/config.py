"""Configuration module for NFT Viewer."""

# Standard library imports
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_RPC_URL = "https://cloudflare-eth.com"
DEFAULT_IPFS_GATEWAY = "https://gateway.ipfs.io/ipfs/"

FAILURE_POLICIES = ("abort", "collect")
MAX_BATCH_CONCURRENCY = 16


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except Exception as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")

    return value


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to a positive float."""
    try:
        result = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if result <= 0:
        raise ValueError(f"'{value}' must be greater than zero")
    return result


def url_validator(value: str) -> str:
    """Validate URL format.

    Args:
        value: URL to validate

    Returns:
        The validated URL

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def failure_policy_validator(value: str) -> str:
    """Validate batch failure policy name.

    Raises:
        ValueError: If not a known policy
    """
    if value.lower() not in FAILURE_POLICIES:
        raise ValueError(f"Failure policy must be one of: {', '.join(FAILURE_POLICIES)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Args:
        value: Log level to validate

    Returns:
        The validated log level

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


@dataclass(frozen=True)
class ViewerConfig:
    """Configuration for the resolution pipeline."""

    rpc_url: str = DEFAULT_RPC_URL
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    http_timeout: Optional[float] = None  # seconds; None keeps the httpx default
    batch_concurrency: int = 4
    failure_policy: str = "collect"
    output_root: str = "."
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 1 <= self.batch_concurrency <= MAX_BATCH_CONCURRENCY:
            raise ValueError(
                f"batch_concurrency must be between 1 and {MAX_BATCH_CONCURRENCY}: "
                f"{self.batch_concurrency}"
            )

        if self.failure_policy not in FAILURE_POLICIES:
            raise ValueError(f"Invalid failure_policy: {self.failure_policy}")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.http_timeout is not None and self.http_timeout <= 0:
            raise ValueError(f"Invalid http_timeout: {self.http_timeout}")


@lru_cache()
def get_viewer_config() -> ViewerConfig:
    """Get viewer configuration from environment variables.

    Uses cached values for efficiency.

    Returns:
        ViewerConfig instance

    Raises:
        ValueError: If environment variables fail validation
    """
    return ViewerConfig(
        rpc_url=get_env_var("NFT_VIEWER_RPC_URL", DEFAULT_RPC_URL,
                            validator=url_validator),
        ipfs_gateway=get_env_var("NFT_VIEWER_IPFS_GATEWAY", DEFAULT_IPFS_GATEWAY,
                                 validator=url_validator),
        http_timeout=get_env_var("NFT_VIEWER_HTTP_TIMEOUT", None,
                                 validator=float_validator),
        batch_concurrency=get_env_var("NFT_VIEWER_BATCH_CONCURRENCY", 4,
                                      validator=int_validator),
        failure_policy=get_env_var("NFT_VIEWER_FAILURE_POLICY", "collect",
                                   validator=failure_policy_validator),
        output_root=get_env_var("NFT_VIEWER_OUTPUT_ROOT", "."),
        log_level=get_env_var("NFT_VIEWER_LOG_LEVEL", "WARNING",
                              validator=log_level_validator)
    )
