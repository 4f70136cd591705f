"""Shared fixtures for secretsm tests."""

import json

import pytest

from secretsm.secrets import SecretsServiceError


class FakeSecretsClient:
    """In-memory stand-in for the Secrets Manager client."""

    def __init__(self, values=None, pages=None):
        # secret id -> SecretString
        self.values = dict(values or {})
        # token (None for the first page) -> (entries, next token)
        self.pages = dict(pages or {})
        self.get_calls = []
        self.list_calls = []
        self.puts = []

    def get_secret_value(self, secret_id):
        self.get_calls.append(secret_id)
        if secret_id not in self.values:
            raise SecretsServiceError(
                f"GetSecretValue {secret_id} failed: ResourceNotFoundException",
                code="ResourceNotFoundException",
            )
        return self.values[secret_id]

    def list_secrets(self, max_results, next_token=None):
        self.list_calls.append((max_results, next_token))
        if next_token not in self.pages:
            raise SecretsServiceError(
                "ListSecrets failed: InvalidNextTokenException",
                code="InvalidNextTokenException",
            )
        return self.pages[next_token]

    def put_secret_value(self, secret_id, secret_string):
        self.puts.append((secret_id, secret_string))
        self.values[secret_id] = secret_string
        return {"Name": secret_id, "VersionId": f"v{len(self.puts)}"}


def entry(name):
    return {"Name": name, "ARN": f"arn:aws:secretsmanager:eu-west-1:123456789012:secret:{name}"}


@pytest.fixture
def fake_client():
    """Fake client holding two app secrets and a three-page listing."""
    return FakeSecretsClient(
        values={
            "app/dev": json.dumps({"user": "admin", "password": "dev-pass", "debug": "true"}),
            "app/prod": json.dumps({"user": "admin", "password": "prod-pass", "replicas": "3"}),
            "plain": "not json",
        },
        pages={
            None: ([entry("app/dev")], "T1"),
            "T1": ([entry("app/prod")], "T2"),
            "T2": ([entry("plain")], None),
        },
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the real environment and config files out of tests."""
    for var in ("AWS_REGION", "AWS_DEFAULT_REGION", "SECRETSM_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
