"""Tests for the domain models: Sensitive, cache entries and request options."""
import pickle

import pytest

from awssm_lookup.secrets.domains.models import (
    CacheEntry,
    CacheKey,
    CreateOptions,
    DEFAULT_CACHE_STALE,
    DEFAULT_EXCLUDE_CHARACTERS,
    LookupRequest,
    REDACTED,
    Sensitive,
)


class TestSensitive:
    """Test suite for the redacting secret wrapper."""

    def test_str_repr_and_format_are_redacted(self):
        """Test that no default conversion reveals the payload."""
        secret = Sensitive("hunter2")
        assert str(secret) == REDACTED
        assert repr(secret) == REDACTED
        assert f"{secret}" == REDACTED
        assert "hunter2" not in f"value={secret!r} {[secret]}"

    def test_unwrap_returns_payload(self):
        """Test that unwrap gives back the original value."""
        assert Sensitive("hunter2").unwrap() == "hunter2"
        assert Sensitive(b"\x00\x01").unwrap() == b"\x00\x01"

    def test_is_binary(self):
        """Test that binary payloads are flagged."""
        assert Sensitive(b"raw").is_binary
        assert not Sensitive("text").is_binary

    def test_equality_compares_payloads(self):
        """Test that two wrappers of the same value are equal."""
        assert Sensitive("a") == Sensitive("a")
        assert Sensitive("a") != Sensitive("b")
        assert Sensitive("a") != "a"

    def test_rejects_other_types(self):
        """Test that only str and bytes can be wrapped."""
        with pytest.raises(TypeError):
            Sensitive(42)

    def test_cannot_be_pickled(self):
        """Test that pickling is refused so values don't leak to disk."""
        with pytest.raises(TypeError):
            pickle.dumps(Sensitive("hunter2"))


class TestCacheEntry:
    """Test suite for freshness of cache entries."""

    def test_fresh_when_younger_than_threshold(self):
        """Test that an entry younger than the threshold is fresh."""
        entry = CacheEntry(Sensitive("v"), fetched_at=100.0)
        assert entry.is_fresh(now=129.9, cache_stale=30)

    def test_stale_at_exact_threshold(self):
        """Test that an entry aged exactly the threshold is stale."""
        entry = CacheEntry(Sensitive("v"), fetched_at=100.0)
        assert not entry.is_fresh(now=130.0, cache_stale=30)

    def test_stale_when_older_than_threshold(self):
        """Test that an entry older than the threshold is stale."""
        entry = CacheEntry(Sensitive("v"), fetched_at=100.0)
        assert not entry.is_fresh(now=140.0, cache_stale=30)

    def test_zero_threshold_is_never_fresh(self):
        """Test that cache_stale=0 always forces a fetch."""
        entry = CacheEntry(Sensitive("v"), fetched_at=100.0)
        assert not entry.is_fresh(now=100.0, cache_stale=0)


class TestCacheKey:
    """Test suite for cache key identity."""

    def test_structural_equality(self):
        """Test that equal tuples are the same key."""
        assert CacheKey("db/pass", None, "us-east-2") == CacheKey("db/pass", None, "us-east-2")
        assert CacheKey("db/pass", None, "us-east-2") == ("db/pass", None, "us-east-2")
        assert CacheKey("db/pass", "v1", "us-east-2") != CacheKey("db/pass", None, "us-east-2")


class TestCreateOptions:
    """Test suite for creation policy options."""

    def test_defaults(self):
        """Test the documented defaults."""
        options = CreateOptions()
        assert options.create_missing is True
        assert options.password_length == 32
        assert options.exclude_characters == DEFAULT_EXCLUDE_CHARACTERS
        assert options.require_each_included_type is True
        assert not any((options.exclude_numbers, options.exclude_punctuation,
                        options.exclude_uppercase, options.exclude_lowercase,
                        options.include_space))
        assert options.name is None
        assert options.description is None

    @pytest.mark.parametrize("length", [0, -1, 4097])
    def test_rejects_out_of_range_length(self, length):
        """Test that password_length must be within service bounds."""
        with pytest.raises(ValueError):
            CreateOptions(password_length=length)

    def test_rejects_excluding_every_class(self):
        """Test that a password needs at least one character class."""
        with pytest.raises(ValueError):
            CreateOptions(exclude_numbers=True, exclude_punctuation=True,
                          exclude_uppercase=True, exclude_lowercase=True)

    def test_from_dict_layers_over_base(self):
        """Test that from_dict keeps base values for keys it doesn't set."""
        base = CreateOptions(password_length=16, description="base")
        options = CreateOptions.from_dict({"exclude_numbers": True}, base=base)
        assert options.password_length == 16
        assert options.description == "base"
        assert options.exclude_numbers is True

    def test_from_dict_rejects_unknown_keys(self):
        """Test that typos in option names are reported."""
        with pytest.raises(ValueError) as exc_info:
            CreateOptions.from_dict({"pasword_length": 10})
        assert "pasword_length" in str(exc_info.value)


class TestLookupRequest:
    """Test suite for lookup request validation."""

    def test_defaults(self):
        """Test default staleness and cache flags."""
        request = LookupRequest(id="db/pass")
        assert request.cache_stale == DEFAULT_CACHE_STALE == 1800
        assert request.ignore_cache is False
        assert request.effective_create_options == CreateOptions()

    def test_rejects_empty_id(self):
        """Test that an id is required."""
        with pytest.raises(ValueError):
            LookupRequest(id="")

    def test_rejects_negative_staleness(self):
        """Test that cache_stale can't be negative."""
        with pytest.raises(ValueError):
            LookupRequest(id="db/pass", cache_stale=-1)
