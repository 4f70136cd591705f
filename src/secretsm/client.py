"""AWS Secrets Manager access for secretsm."""

import logging
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import Config
from .secrets import SecretsServiceError

logger = logging.getLogger(__name__)


class SecretsClient(Protocol):
    """The three Secrets Manager calls secretsm needs."""

    def get_secret_value(self, secret_id: str) -> str:
        """Return the SecretString of a secret."""
        ...

    def list_secrets(
        self, max_results: int, next_token: Optional[str] = None
    ) -> tuple[list[dict], Optional[str]]:
        """Return one page of secret list entries and the next token, if any."""
        ...

    def put_secret_value(self, secret_id: str, secret_string: str) -> dict:
        """Store a new SecretString version and return the service response."""
        ...


def _service_error(operation: str, secret_id: Optional[str], e: Exception) -> SecretsServiceError:
    target = f" {secret_id}" if secret_id else ""
    if isinstance(e, ClientError):
        code = e.response.get("Error", {}).get("Code", "Unknown")
        message = e.response.get("Error", {}).get("Message", str(e))
        return SecretsServiceError(f"{operation}{target} failed: {code}: {message}", code=code)
    return SecretsServiceError(f"{operation}{target} failed: {e}")


class AWSSecretsClient:
    """SecretsClient backed by boto3."""

    def __init__(self, region: str, session: Optional[boto3.session.Session] = None) -> None:
        try:
            session = session or boto3.session.Session()
            self._client = session.client("secretsmanager", region_name=region)
        except BotoCoreError as e:
            raise SecretsServiceError(f"Cannot create secretsmanager client: {e}") from e

    def get_secret_value(self, secret_id: str) -> str:
        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except (ClientError, BotoCoreError) as e:
            raise _service_error("GetSecretValue", secret_id, e) from e

        if "SecretString" not in response:
            raise SecretsServiceError(f"Secret {secret_id} has no string value (binary secrets are not supported)")
        return response["SecretString"]

    def list_secrets(self, max_results: int, next_token: Optional[str] = None):
        kwargs = {"MaxResults": max_results}
        if next_token:
            kwargs["NextToken"] = next_token

        try:
            response = self._client.list_secrets(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _service_error("ListSecrets", None, e) from e

        return response.get("SecretList", []), response.get("NextToken")

    def put_secret_value(self, secret_id: str, secret_string: str) -> dict:
        try:
            response = self._client.put_secret_value(SecretId=secret_id, SecretString=secret_string)
        except (ClientError, BotoCoreError) as e:
            raise _service_error("PutSecretValue", secret_id, e) from e

        logger.debug("Put %s version %s", secret_id, response.get("VersionId"))
        return response


def create_client(config: Config) -> SecretsClient:
    """Create the Secrets Manager client for this invocation."""
    logger.debug("Creating secretsmanager client in %s", config.region)
    return AWSSecretsClient(config.region)
