"""Shared fixtures: isolated home/config, an in-memory secret store and a fake clock."""
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

from awssm_lookup.secrets.domains.errors import SecretNotFoundError, SecretServiceError
from awssm_lookup.secrets.domains.models import Sensitive
from awssm_lookup.secrets.domains import region
from awssm_lookup.secrets.workflows import secret_operations


def client_error(code: str, operation: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeSecretStore:
    """In-memory stand-in for AWSSecretClient that records every call."""

    def __init__(self, password: str = "generated-Passw0rd"):
        self.secrets = {}
        self.password = password
        self.get_calls = []
        self.password_calls = []
        self.create_calls = []
        self.get_error = None
        self.password_response = None
        self.create_response = None

    def add(self, secret_id, value, version=None, region="us-east-2"):
        self.secrets[(secret_id, version, region)] = value

    def get_secret_value(self, secret_id, version, region):
        self.get_calls.append((secret_id, version, region))
        if self.get_error is not None:
            raise self.get_error
        try:
            return Sensitive(self.secrets[(secret_id, version, region)])
        except KeyError:
            raise SecretNotFoundError(f"No matching secret {secret_id}", secret_id=secret_id)

    def get_random_password(self, region, **params):
        self.password_calls.append((region, params))
        if self.password_response is not None:
            return self.password_response
        return {"RandomPassword": self.password}

    def create_secret(self, region, **params):
        self.create_calls.append((region, params))
        if self.create_response is not None:
            return self.create_response
        self.secrets[(params["Name"], None, region)] = params["SecretString"]
        return {
            "ARN": f"arn:aws:secretsmanager:{region}:123456789012:secret:{params['Name']}-AbCdEf",
            "Name": params["Name"],
        }


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store():
    return FakeSecretStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service_error():
    return SecretServiceError("Throttled", secret_id="db/pass", code="ThrottlingException")


@pytest.fixture(autouse=True)
def temp_home(tmp_path, monkeypatch):
    """Point HOME at a temp dir and clear AWS/config environment for every test."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)
    for var in ("AWSSM_LOOKUP_CONFIG", "AWS_REGION", "AWS_DEFAULT_REGION", "AWS_PROFILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", str(fake_home / "aws-config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(fake_home / "aws-credentials"))
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")
    return fake_home


@pytest.fixture(autouse=True)
def reset_process_cache(monkeypatch):
    """Each test starts with an empty per-process cache, no shared client and no remembered IMDS answer."""
    secret_operations.default_cache().clear()
    region.instance_metadata_region.cache_clear()
    monkeypatch.setattr(secret_operations, "_default_client", None)
    yield
    secret_operations.default_cache().clear()
    region.instance_metadata_region.cache_clear()


@pytest.fixture
def config_dir(temp_home):
    config_dir = temp_home / ".config" / "awssm-lookup"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
