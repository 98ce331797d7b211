"""Configuration loading for s3cli.

Settings come from command-line flags first, then environment variables:

    S3_ENDPOINT=http://host:port   (only read if --endpoint is not set)

    AWS_ACCESS_KEY_ID=AK           (only read if --ak/--sk and --profile are not set)
    AWS_ACCESS_KEY=AK              (only read if AWS_ACCESS_KEY_ID is not set)
    AWS_SECRET_ACCESS_KEY=SK       (only read if --ak/--sk and --profile are not set)
    AWS_SECRET_KEY=SK              (only read if AWS_SECRET_ACCESS_KEY is not set)

Anything still unset is left to boto3's own credential chain.
"""

import os
import re
from datetime import timedelta
from typing import Mapping, Optional

from s3cli.models import ClientConfig


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


ENDPOINT_ENV_VAR = "S3_ENDPOINT"
ACCESS_KEY_ENV_VARS = ("AWS_ACCESS_KEY_ID", "AWS_ACCESS_KEY")
SECRET_KEY_ENV_VARS = ("AWS_SECRET_ACCESS_KEY", "AWS_SECRET_KEY")

DEFAULT_REGION = "cn-north-1"
DEFAULT_EXPIRY = "24h"

_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "24h", "1h30m", "90s" or "1.5h".

    Raises:
        ConfigError: If the string is malformed or not positive.
    """
    value = text.strip()
    total = timedelta()
    position = 0

    while position < len(value):
        match = _DURATION_PART.match(value, position)
        if match is None:
            raise ConfigError(f"Invalid duration: {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if total <= timedelta():
        raise ConfigError(f"Duration must be positive: {text!r}")

    return total


def _first_env(environ: Mapping[str, str], names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


def load_config(
    endpoint: Optional[str] = None,
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
    profile: Optional[str] = None,
    region: str = DEFAULT_REGION,
    presign: bool = False,
    expire: str = DEFAULT_EXPIRY,
    verbose: bool = False,
    debug: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Resolve flags and environment into a ClientConfig.

    Args:
        environ: Environment to read (defaults to os.environ).

    Raises:
        ConfigError: If only one of access/secret key is given or the
                     presign expiry is malformed.
    """
    if environ is None:
        environ = os.environ

    if bool(access_key) != bool(secret_key):
        raise ConfigError("--ak and --sk must be given together")

    if not access_key and not profile:
        env_access = _first_env(environ, ACCESS_KEY_ENV_VARS)
        env_secret = _first_env(environ, SECRET_KEY_ENV_VARS)
        if env_access and env_secret:
            access_key, secret_key = env_access, env_secret

    if not endpoint:
        endpoint = environ.get(ENDPOINT_ENV_VAR) or None

    return ClientConfig(
        endpoint=endpoint,
        access_key=access_key or None,
        secret_key=secret_key or None,
        profile=profile or None,
        region=region or DEFAULT_REGION,
        # Custom endpoints are always addressed path-style
        addressing_style="path" if endpoint else "auto",
        presign=presign,
        presign_expiry=parse_duration(expire),
        verbose=verbose,
        debug=debug,
    )
