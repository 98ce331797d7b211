"""Credential providers used by the presign signer.

Credentials are fetched on every call; caching and refresh are left to
botocore's credential objects.
"""

from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import BotoCoreError

from s3cli.errors import CredentialsUnavailable
from s3cli.models import Credentials


class CredentialProvider(ABC):
    """Source of access/secret key pairs."""

    @abstractmethod
    def retrieve(self) -> Credentials:
        """Return the current credentials.

        Raises:
            CredentialsUnavailable: If no usable credentials can be found.
        """
        pass


class StaticCredentialProvider(CredentialProvider):
    """Provider that always returns the same key pair."""

    def __init__(self, access_key_id: str, secret_access_key: str):
        self._credentials = Credentials(access_key_id, secret_access_key)

    def retrieve(self) -> Credentials:
        return self._credentials


class SessionCredentialProvider(CredentialProvider):
    """Provider backed by a boto3 session's credential chain.

    Args:
        session: A boto3.session.Session (or anything exposing
                 get_credentials()).
    """

    def __init__(self, session: Any):
        self.session = session

    def retrieve(self) -> Credentials:
        try:
            resolved = self.session.get_credentials()
            if resolved is None:
                raise CredentialsUnavailable("no access/secret key configured")
            frozen = resolved.get_frozen_credentials()
        except BotoCoreError as e:
            raise CredentialsUnavailable(f"access/secret key, {e}") from e

        if not frozen.access_key or not frozen.secret_key:
            raise CredentialsUnavailable("access/secret key is empty")

        return Credentials(frozen.access_key, frozen.secret_key)
