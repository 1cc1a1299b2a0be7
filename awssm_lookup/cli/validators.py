"""Input validation for CLI arguments."""
import re
import sys

# Secret names: 1-512 characters from this set. ARNs are accepted as-is.
SECRET_NAME_PATTERN = re.compile(r'^[A-Za-z0-9/_+=.@-]{1,512}$')
SECRET_ARN_PATTERN = re.compile(r'^arn:aws[a-z-]*:secretsmanager:[a-z0-9-]+:\d{12}:secret:.+$')


def is_valid_secret_id(secret_id: str) -> bool:
    return bool(SECRET_NAME_PATTERN.match(secret_id) or SECRET_ARN_PATTERN.match(secret_id))


def validate_secret_id(secret_id: str) -> None:
    """
    Validate secret id matches Secrets Manager naming rules.

    Secret names allow only: [A-Za-z0-9/_+=.@-], up to 512 characters.
    A full secret ARN is also accepted.

    Args:
        secret_id: Secret name or ARN to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not secret_id:
        print("Error: Secret id cannot be empty", file=sys.stderr)
        sys.exit(2)

    if not is_valid_secret_id(secret_id):
        print(f"Error: Invalid secret id '{secret_id}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers and / _ + = . @ -", file=sys.stderr)
        print("Maximum length: 512 characters (or pass a full secret ARN)", file=sys.stderr)
        print("\nExamples of valid ids:", file=sys.stderr)
        print("  ✓ db/password", file=sys.stderr)
        print("  ✓ prod/api-key@v2", file=sys.stderr)
        print("\nExamples of invalid ids:", file=sys.stderr)
        print("  ✗ my secret (contains space)", file=sys.stderr)
        print("  ✗ key#1 (contains #)", file=sys.stderr)
        sys.exit(2)


def validate_cache_stale(seconds: float) -> None:
    """
    Validate the staleness threshold is non-negative.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if seconds < 0:
        print(f"Error: --cache-stale must be zero or more seconds, got {seconds}", file=sys.stderr)
        sys.exit(2)
