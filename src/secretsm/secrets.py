"""Core secrets functionality: listing, payload changes and comparison."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SecretsError(Exception):
    """Base exception for secretsm errors."""
    pass


class ConfigError(SecretsError):
    """Invalid or incomplete configuration."""
    pass


class RegionNotFoundError(ConfigError):
    """No AWS region could be resolved."""
    pass


class KeyFormatError(SecretsError):
    """A set argument is neither key=value nor key-."""
    pass


class KeyConflictError(SecretsError):
    """The same key is set and removed in one command."""
    pass


class KeyNotFoundError(SecretsError):
    """Secret key not found."""
    pass


class SecretPayloadError(SecretsError):
    """The secret value is not a JSON object."""
    pass


class SecretsServiceError(SecretsError):
    """A Secrets Manager call failed."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


@dataclass
class SecretRef:
    """A secret as returned by ListSecrets."""

    name: str
    arn: str

    @classmethod
    def from_entry(cls, entry: dict) -> "SecretRef":
        return cls(name=entry.get("Name", ""), arn=entry.get("ARN", ""))


def decode_payload(secret_string: str) -> dict:
    """Decode a SecretString into its key/value mapping."""
    try:
        payload = json.loads(secret_string)
    except (TypeError, ValueError) as e:
        raise SecretPayloadError(f"Secret value is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SecretPayloadError(
            f"Secret value must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def encode_payload(payload: dict) -> str:
    """Encode a payload as a compact JSON SecretString, keeping key order."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def render_value(value: Any) -> str:
    """Strings as-is, anything else as JSON text."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def list_all_secrets(client, max_results: int = 100, next_token: Optional[str] = None) -> list[SecretRef]:
    """
    List every secret, following NextToken until the service stops returning one.

    Any failed page aborts the whole listing.
    """
    secrets = []
    pages = 0

    while True:
        entries, next_token = client.list_secrets(max_results, next_token)
        pages += 1
        secrets.extend(SecretRef.from_entry(entry) for entry in entries)
        if not next_token:
            break
        logger.debug("Next token: %s", next_token)

    logger.debug("Listed %d secrets in %d pages", len(secrets), pages)
    return secrets


def get_secret_string(client, secret_id: str) -> str:
    """Get the raw SecretString of a secret."""
    return client.get_secret_value(secret_id)


def get_secret_value(client, secret_id: str) -> dict:
    """Get a secret's decoded key/value payload."""
    return decode_payload(client.get_secret_value(secret_id))


def list_secret_keys(client, secret_id: str) -> list[str]:
    """List the keys stored in a secret."""
    return sorted(get_secret_value(client, secret_id).keys())


def parse_keys(tokens: list[str]) -> tuple[dict[str, str], list[str]]:
    """
    Parse set arguments into keys to add and keys to remove.

    "key=value" sets key (split at the first "="), "key-" removes key.
    Anything else is rejected, as is a key that is both set and removed.
    """
    add = {}
    remove = []

    for token in tokens:
        if "=" in token:
            key, value = token.split("=", 1)
            add[key] = value
        elif token.endswith("-"):
            remove.append(token[:-1])
        else:
            raise KeyFormatError(f"Key/Value pair {token} invalid")

    for key in remove:
        if key in add:
            raise KeyConflictError(f"{key} is set and removed in the same command")

    return add, remove


def apply_changes(payload: dict, add: dict[str, str], remove: list[str]) -> dict:
    """
    Return a copy of payload with add applied and remove deleted.

    Adding a new key only warns. Removing a missing key raises
    KeyNotFoundError and nothing should be written.
    """
    updated = dict(payload)

    for key, value in add.items():
        if key not in updated:
            logger.warning("Key %s doesn't exist, adding it", key)
        updated[key] = value

    for key in remove:
        if key not in updated:
            raise KeyNotFoundError(f"Key {key} doesn't exist, can't be deleted")
        del updated[key]

    return updated


def update_secret(client, secret_id: str, add: dict[str, str], remove: list[str]) -> dict:
    """Fetch a secret's payload and apply changes to it (nothing is written)."""
    payload = get_secret_value(client, secret_id)
    return apply_changes(payload, add, remove)


def put_secret(client, secret_id: str, payload: dict) -> dict:
    """Write a payload back as the secret's new version."""
    return client.put_secret_value(secret_id, encode_payload(payload))


def _same_value(a: Any, b: Any) -> bool:
    # JSON text equality keeps 1, 1.0, True and "1" apart
    return json.dumps(a, sort_keys=True) == json.dumps(b, sort_keys=True)


def compare_secrets(a: dict, b: dict) -> dict[str, str]:
    """
    Keys of a whose value differs in b, as {"key=<a value>": "key=<b value>"}.

    A key missing from b renders as "key=". Only a's keys are checked; call
    it both ways to see keys unique to each side. When both sides would print
    the same (5432 and "5432"), they are shown as JSON so the difference is
    visible.
    """
    diff = {}
    for key, value in a.items():
        if key in b and _same_value(b[key], value):
            continue
        left = render_value(value)
        right = render_value(b[key]) if key in b else ""
        if key in b and left == right:
            left, right = json.dumps(value), json.dumps(b[key])
        diff[f"{key}={left}"] = f"{key}={right}"
    return diff
