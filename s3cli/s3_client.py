"""S3 client factory for s3cli.

Creates the boto3 session and S3 client configured with the endpoint,
credentials, region, and addressing style from a ClientConfig.
"""

import boto3
from botocore.client import Config
from botocore.exceptions import ProfileNotFound

from s3cli.config import ConfigError
from s3cli.errors import InvalidEndpoint
from s3cli.models import ClientConfig


def build_session(config: ClientConfig) -> boto3.session.Session:
    """Build a boto3 session from explicit keys or a named profile.

    Raises:
        ConfigError: If the named profile does not exist.
    """
    try:
        return boto3.session.Session(
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            profile_name=config.profile,
            region_name=config.region,
        )
    except ProfileNotFound as e:
        raise ConfigError(str(e)) from e


def build_s3_client(config: ClientConfig, session=None):
    """Build a boto3 S3 client for the given configuration.

    Args:
        config: Resolved client configuration.
        session: Session to create the client from (built from config
                 when omitted).

    Returns:
        A boto3 S3 client.

    Raises:
        InvalidEndpoint: If botocore rejects the endpoint URL.

    Note:
        The signature version is 's3v4'; it only affects requests sent
        through the client and the --presign URLs boto3 generates. The
        `presign` command signs with its own legacy scheme.
    """
    if session is None:
        session = build_session(config)

    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": config.addressing_style},
    )

    try:
        return session.client(
            "s3",
            endpoint_url=config.endpoint,
            region_name=config.region,
            config=boto_config,
        )
    except ValueError as e:
        raise InvalidEndpoint(f"invalid endpoint {config.endpoint!r}: {e}") from e
