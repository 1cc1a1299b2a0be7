"""Password generation and creation of missing secrets."""
import logging
from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from .errors import SecretCreateError, SecretLookupError
from .models import CreateOptions, Sensitive

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Created by awssm-lookup"


def password_request(options: CreateOptions) -> Dict[str, Any]:
    """GetRandomPassword parameters for the given options."""
    params = {
        "PasswordLength": options.password_length,
        "ExcludeNumbers": options.exclude_numbers,
        "ExcludePunctuation": options.exclude_punctuation,
        "ExcludeUppercase": options.exclude_uppercase,
        "ExcludeLowercase": options.exclude_lowercase,
        "IncludeSpace": options.include_space,
        "RequireEachIncludedType": options.require_each_included_type,
    }
    # The service rejects an empty ExcludeCharacters
    if options.exclude_characters:
        params["ExcludeCharacters"] = options.exclude_characters
    return params


def create_request(secret_id: str, options: CreateOptions, password: str) -> Dict[str, Any]:
    """CreateSecret parameters storing ``password`` under the options' name."""
    return {
        "Name": options.name or secret_id,
        "Description": options.description or DEFAULT_DESCRIPTION,
        "SecretString": password,
    }


def create_secret(client: Any, secret_id: str, region: str, options: CreateOptions) -> Sensitive:
    """
    Generate a password and store it as a new secret.

    Args:
        client: Secret store client exposing get_random_password and create_secret
        secret_id: Id that was looked up and found missing
        region: Region to create the secret in
        options: Password and naming policy

    Returns:
        The generated password, wrapped as Sensitive

    Raises:
        SecretCreateError: If either call fails or returns an unusable response
    """
    try:
        response = client.get_random_password(region, **password_request(options))
    except (ClientError, BotoCoreError, SecretLookupError) as e:
        raise SecretCreateError(f"Failed to generate a password for {secret_id}: {e}", secret_id=secret_id)

    password = (response or {}).get("RandomPassword")
    if not isinstance(password, str) or not password:
        raise SecretCreateError(f"Password generation for {secret_id} returned no password", secret_id=secret_id)

    request = create_request(secret_id, options, password)
    try:
        created = client.create_secret(region, **request)
    except (ClientError, BotoCoreError, SecretLookupError) as e:
        raise SecretCreateError(f"Failed to create secret {request['Name']} in {region}: {e}", secret_id=secret_id)

    if not (created or {}).get("ARN"):
        raise SecretCreateError(
            f"Creating secret {request['Name']} in {region} returned an invalid response",
            secret_id=secret_id,
        )

    logger.info(f"Created secret {request['Name']} in {region} ({created['ARN']})")
    return Sensitive(password)
