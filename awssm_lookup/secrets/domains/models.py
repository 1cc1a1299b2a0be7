"""Domain models for secret lookup."""
from dataclasses import dataclass, field, fields
from typing import Any, Dict, NamedTuple, Optional, Union

DEFAULT_CACHE_STALE = 1800.0
DEFAULT_PASSWORD_LENGTH = 32
# Never used in generated passwords unless exclude_characters is overridden
DEFAULT_EXCLUDE_CHARACTERS = "\"'`\\/@|;$"
MAX_PASSWORD_LENGTH = 4096

REDACTED = "Sensitive [value redacted]"


class Sensitive:
    """
    Wrapper for a secret payload that never renders its contents.

    str(), repr() and format() all produce a redacted marker. Use unwrap()
    to get at the actual value.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, bytes]):
        if not isinstance(value, (str, bytes)):
            raise TypeError(f"Sensitive wraps str or bytes, not {type(value).__name__}")
        self._value = value

    def unwrap(self) -> Union[str, bytes]:
        return self._value

    @property
    def is_binary(self) -> bool:
        return isinstance(self._value, bytes)

    def __str__(self) -> str:
        return REDACTED

    def __repr__(self) -> str:
        return REDACTED

    def __format__(self, format_spec: str) -> str:
        return format(REDACTED, format_spec)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensitive):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __reduce__(self):
        raise TypeError("Sensitive values cannot be pickled")


class CacheKey(NamedTuple):
    """Cache slot identity: two lookups with the same tuple share an entry."""
    id: str
    version: Optional[str]
    region: str


@dataclass(frozen=True)
class CacheEntry:
    """A cached secret and the clock reading (seconds) when it was fetched."""
    value: Sensitive
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float, cache_stale: float) -> bool:
        """Fresh means strictly younger than the staleness threshold."""
        return self.age(now) < cache_stale


@dataclass(frozen=True)
class CreateOptions:
    """Policy for creating a secret that does not exist yet."""
    create_missing: bool = True
    password_length: int = DEFAULT_PASSWORD_LENGTH
    exclude_characters: str = DEFAULT_EXCLUDE_CHARACTERS
    exclude_numbers: bool = False
    exclude_punctuation: bool = False
    exclude_uppercase: bool = False
    exclude_lowercase: bool = False
    include_space: bool = False
    require_each_included_type: bool = True
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.password_length, bool) or not isinstance(self.password_length, int):
            raise ValueError(f"password_length must be an integer, got {self.password_length!r}")
        if not 1 <= self.password_length <= MAX_PASSWORD_LENGTH:
            raise ValueError(
                f"password_length must be between 1 and {MAX_PASSWORD_LENGTH}, got {self.password_length}"
            )
        if all((self.exclude_numbers, self.exclude_punctuation,
                self.exclude_uppercase, self.exclude_lowercase)):
            raise ValueError("Cannot exclude every character class from a generated password")

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["CreateOptions"] = None) -> "CreateOptions":
        """
        Build options from a plain mapping, layered over ``base``.

        Raises:
            ValueError: On keys that are not CreateOptions fields
        """
        unknown = set(data) - cls.field_names()
        if unknown:
            raise ValueError(f"Unknown create option(s): {', '.join(sorted(unknown))}")
        values = {f.name: getattr(base, f.name) for f in fields(cls)} if base else {}
        values.update(data)
        return cls(**values)


@dataclass
class LookupRequest:
    """Request for resolving a secret."""
    id: str
    version: Optional[str] = None
    region: Optional[str] = None
    cache_stale: float = DEFAULT_CACHE_STALE
    ignore_cache: bool = False
    create_options: Optional[CreateOptions] = field(default=None)

    def __post_init__(self):
        if not self.id:
            raise ValueError("Secret id cannot be empty")
        if self.cache_stale < 0:
            raise ValueError(f"cache_stale must be non-negative, got {self.cache_stale}")

    @property
    def effective_create_options(self) -> CreateOptions:
        return self.create_options if self.create_options is not None else CreateOptions()
