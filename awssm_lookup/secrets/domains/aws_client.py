"""AWS Secrets Manager client wrapper."""
import logging
import threading
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import SecretNotFoundError, SecretServiceError
from .models import Sensitive

logger = logging.getLogger(__name__)

DEFAULT_RETRY_MAX_ATTEMPTS = 3

# Staging labels that the service manages itself
VERSION_STAGES = frozenset({"AWSCURRENT", "AWSPREVIOUS", "AWSPENDING"})
STAGE_PREFIX = "stage:"

NOT_FOUND_CODE = "ResourceNotFoundException"


def version_parameters(version: Optional[str]) -> Dict[str, str]:
    """
    Translate a lookup version into GetSecretValue parameters.

    AWS-managed staging labels, or any label written as ``stage:<label>``,
    select by VersionStage. Everything else is treated as a VersionId.
    """
    if not version:
        return {}
    if version in VERSION_STAGES:
        return {"VersionStage": version}
    if version.startswith(STAGE_PREFIX):
        return {"VersionStage": version[len(STAGE_PREFIX):]}
    return {"VersionId": version}


def error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


class AWSSecretClient:
    """Wrapper around boto3 Secrets Manager clients, one per region."""

    def __init__(self, retry_max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS, session: Any = None):
        self._retry_max_attempts = retry_max_attempts
        self._session = session
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def client(self, region: str) -> Any:
        """Lazy-initialize the client for a region."""
        with self._lock:
            if region not in self._clients:
                config = Config(retries={"max_attempts": self._retry_max_attempts, "mode": "standard"})
                factory = self._session.client if self._session is not None else boto3.client
                self._clients[region] = factory("secretsmanager", region_name=region, config=config)
                logger.debug(f"Created Secrets Manager client for region {region}")
            return self._clients[region]

    def get_secret_value(self, secret_id: str, version: Optional[str], region: str) -> Sensitive:
        """
        Fetch a secret from AWS Secrets Manager.

        Args:
            secret_id: Name or ARN of the secret
            version: Version id or staging label, or None for AWSCURRENT
            region: AWS region to query

        Returns:
            The SecretString or SecretBinary payload, wrapped as Sensitive

        Raises:
            SecretNotFoundError: If no secret matches id + version
            SecretServiceError: On any other service or transport failure
        """
        try:
            response = self.client(region).get_secret_value(SecretId=secret_id, **version_parameters(version))
        except ClientError as e:
            code = error_code(e)
            if code == NOT_FOUND_CODE:
                raise SecretNotFoundError(
                    f"No matching secret {secret_id} (version {version}) found in {region}",
                    secret_id=secret_id,
                )
            raise SecretServiceError(
                f"Error when looking up {secret_id} in {region}: {e}",
                secret_id=secret_id,
                code=code,
            )
        except BotoCoreError as e:
            raise SecretServiceError(f"Error when looking up {secret_id} in {region}: {e}", secret_id=secret_id)

        logger.debug(f"Response received for {secret_id}")
        if response.get("SecretString") is not None:
            return Sensitive(response["SecretString"])
        if response.get("SecretBinary") is not None:
            return Sensitive(bytes(response["SecretBinary"]))
        raise SecretServiceError(f"Response for {secret_id} contained no secret payload", secret_id=secret_id)

    def get_random_password(self, region: str, **params: Any) -> Dict[str, Any]:
        """Call GetRandomPassword. Service errors propagate as botocore exceptions."""
        return self.client(region).get_random_password(**params)

    def create_secret(self, region: str, **params: Any) -> Dict[str, Any]:
        """Call CreateSecret. Service errors propagate as botocore exceptions."""
        return self.client(region).create_secret(**params)
