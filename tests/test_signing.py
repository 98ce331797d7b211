"""Tests for signing.py module.

Tests canonical string construction, HMAC-SHA1 signing, and presigned
URL assembly for both path conventions.
"""

import base64
import hashlib
import hmac
from datetime import timedelta
from unittest.mock import Mock
from urllib.parse import parse_qs, urlsplit

import pytest

from s3cli.credentials import StaticCredentialProvider
from s3cli.errors import CredentialsUnavailable, InvalidArgument, InvalidEndpoint
from s3cli.models import HttpMethod, PathStyle, PresignRequest
from s3cli.signing import (
    Presigner,
    build_canonical_string,
    canonical_path,
    parse_endpoint,
    presign_url,
    sign,
)

NOW = 1700000000
ENDPOINT = "http://172.16.3.99:9020"


def fixed_clock():
    return NOW


def reference_signature(secret: str, canonical: str) -> str:
    """Independent HMAC-SHA1/base64 computation."""
    digest = hmac.new(secret.encode(), canonical.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


class TestBuildCanonicalString:
    """Tests for build_canonical_string."""

    def test_field_order(self):
        """Fields should be method, empty MD5, type, expires, path."""
        canonical = build_canonical_string("PUT", "bucket/key", "text/plain", NOW)

        assert canonical == f"PUT\n\ntext/plain\n{NOW}\n/bucket/key"

    @pytest.mark.parametrize("bucket_key", ["b/k", "bucket/dir/sub/file.txt", "bucket"])
    @pytest.mark.parametrize("path_style", [PathStyle.ESCAPED, PathStyle.RAW])
    def test_exactly_four_separators(self, bucket_key, path_style):
        """Every canonical string should have exactly four newlines."""
        canonical = build_canonical_string(
            "GET", bucket_key, "", NOW, path_style, endpoint=ENDPOINT
        )

        assert canonical.count("\n") == 4
        method, md5, content_type, expires, path = canonical.split("\n")
        assert method == "GET"
        assert md5 == ""
        assert content_type == ""
        assert expires == str(NOW)
        assert path == f"/{bucket_key}"

    def test_lowercase_method_is_normalized(self):
        """Method strings should be upper-cased."""
        canonical = build_canonical_string("delete", "bucket/key", "", NOW)
        assert canonical.startswith("DELETE\n")

    def test_enum_method(self):
        """HttpMethod members should be accepted directly."""
        canonical = build_canonical_string(HttpMethod.HEAD, "bucket/key", "", NOW)
        assert canonical.startswith("HEAD\n")

    def test_unknown_method_rejected(self):
        """Verbs outside the five supported ones are invalid."""
        with pytest.raises(InvalidArgument, match="method"):
            build_canonical_string("PATCH", "bucket/key", "", NOW)

    @pytest.mark.parametrize("bucket_key", ["", "/bucket/key", "/"])
    @pytest.mark.parametrize("path_style", [PathStyle.ESCAPED, PathStyle.RAW])
    def test_invalid_bucket_key(self, bucket_key, path_style):
        """Empty or slash-prefixed bucket/key should be InvalidArgument."""
        with pytest.raises(InvalidArgument, match="invalid bucket/key"):
            build_canonical_string("GET", bucket_key, "", NOW, path_style, ENDPOINT)


class TestCanonicalPath:
    """Tests for the two path conventions."""

    def test_escaped_encodes_space_and_plus(self):
        """ESCAPED should percent-encode spaces and plus signs."""
        path = canonical_path("bucket/my key+1.txt", PathStyle.ESCAPED)
        assert path == "/bucket/my%20key%2B1.txt"

    def test_escaped_keeps_slashes(self):
        """Key separators should stay literal."""
        assert canonical_path("bucket/a/b/c", PathStyle.ESCAPED) == "/bucket/a/b/c"

    def test_raw_keeps_literal_bytes(self):
        """RAW should not re-escape the key."""
        path = canonical_path("bucket/my key+1.txt", PathStyle.RAW, ENDPOINT)
        assert path == "/bucket/my key+1.txt"

    def test_raw_keeps_endpoint_prefix(self):
        """RAW path comes from endpoint + "/" + bucket/key."""
        path = canonical_path("bucket/key", PathStyle.RAW, "http://host:9000/s3/")
        assert path == "/s3/bucket/key"

    def test_escaped_ignores_endpoint_path(self):
        """ESCAPED replaces whatever path the endpoint carries."""
        path = canonical_path("bucket/key", PathStyle.ESCAPED, "http://host:9000/s3")
        assert path == "/bucket/key"


class TestSign:
    """Tests for the HMAC-SHA1 signer."""

    def test_matches_reference_hmac(self):
        """Signature should equal an independently computed HMAC."""
        canonical = f"GET\n\n\n{NOW}\n/bucket/key"
        assert sign("secret", canonical) == reference_signature("secret", canonical)

    def test_is_deterministic(self):
        """Same key and string should always sign identically."""
        canonical = f"PUT\n\ntext/plain\n{NOW}\n/bucket/key"
        assert sign("secret", canonical) == sign("secret", canonical)

    def test_padded_base64_of_sha1_digest(self):
        """A 20-byte SHA-1 digest encodes to 28 padded base64 characters."""
        signature = sign("secret", "anything")

        assert len(signature) == 28
        assert signature.endswith("=")
        assert len(base64.b64decode(signature)) == 20

    def test_different_keys_differ(self):
        """Changing the secret should change the signature."""
        assert sign("secret-a", "data") != sign("secret-b", "data")


class TestParseEndpoint:
    """Tests for endpoint validation."""

    def test_valid_endpoint(self):
        """Scheme, host and port should be parsed."""
        parts = parse_endpoint("https://s3.example.com:9000")
        assert parts.scheme == "https"
        assert parts.netloc == "s3.example.com:9000"

    @pytest.mark.parametrize(
        "endpoint",
        ["", None, "not a url", "localhost:9000", "http://[::1", "http://host:port"],
    )
    def test_invalid_endpoint(self, endpoint):
        """Unparseable or relative endpoints should be InvalidEndpoint."""
        with pytest.raises(InvalidEndpoint):
            parse_endpoint(endpoint)


class TestPresignUrl:
    """Tests for presigned URL assembly."""

    @pytest.fixture
    def credentials(self):
        """Static test credentials."""
        return StaticCredentialProvider("AKID", "SECRET")

    def _query(self, url):
        return parse_qs(urlsplit(url).query, keep_blank_values=True)

    def test_adds_three_parameters(self, credentials):
        """URL should carry AWSAccessKeyId, Expires and Signature."""
        request = PresignRequest(HttpMethod.GET, "bucket/key01", "", timedelta(hours=1))

        url = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)

        query = self._query(url)
        assert set(query) == {"AWSAccessKeyId", "Expires", "Signature"}
        assert query["AWSAccessKeyId"] == ["AKID"]
        assert query["Expires"] == [str(NOW + 3600)]

    def test_signature_covers_canonical_string(self, credentials):
        """Signature should be the HMAC of the canonical string."""
        request = PresignRequest(HttpMethod.PUT, "bucket/key02", "text/plain", timedelta(hours=1))

        url = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)

        expected = reference_signature(
            "SECRET", f"PUT\n\ntext/plain\n{NOW + 3600}\n/bucket/key02"
        )
        assert self._query(url)["Signature"] == [expected]

    def test_url_targets_endpoint_and_path(self, credentials):
        """URL should point at the endpoint with the bucket/key path."""
        request = PresignRequest(HttpMethod.GET, "bucket/key01")

        url = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)

        parts = urlsplit(url)
        assert parts.scheme == "http"
        assert parts.netloc == "172.16.3.99:9020"
        assert parts.path == "/bucket/key01"

    def test_expiry_truncated_to_seconds(self, credentials):
        """Fractional clock and expiry values should be truncated."""
        request = PresignRequest(HttpMethod.GET, "bucket/key", "", timedelta(seconds=10.7))

        url = presign_url(ENDPOINT, request, credentials, clock=lambda: NOW + 0.9)

        assert self._query(url)["Expires"] == [str(NOW + 10)]

    def test_preserves_existing_query(self, credentials):
        """Query parameters already on the endpoint should be kept."""
        request = PresignRequest(HttpMethod.GET, "bucket/key")

        url = presign_url(f"{ENDPOINT}?tenant=alpha", request, credentials, clock=fixed_clock)

        query = self._query(url)
        assert query["tenant"] == ["alpha"]
        assert "Signature" in query

    def test_replaces_existing_signature_parameters(self, credentials):
        """Signature parameters on the endpoint should be overwritten."""
        request = PresignRequest(HttpMethod.GET, "bucket/key")

        url = presign_url(
            f"{ENDPOINT}?Signature=stale&AWSAccessKeyId=old", request, credentials, clock=fixed_clock
        )

        query = self._query(url)
        assert query["AWSAccessKeyId"] == ["AKID"]
        assert len(query["Signature"]) == 1
        assert query["Signature"] != ["stale"]

    def test_deterministic_for_same_second(self, credentials):
        """Identical inputs within the same second give identical URLs."""
        request = PresignRequest(HttpMethod.DELETE, "bucket/key", "", timedelta(minutes=5))

        first = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)
        second = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)

        assert first == second

    def test_escaped_and_raw_differ_for_space(self, credentials):
        """The two conventions are not interchangeable for escapable keys."""
        request = PresignRequest(HttpMethod.GET, "bucket/my key.txt")

        escaped = presign_url(ENDPOINT, request, credentials, PathStyle.ESCAPED, fixed_clock)
        raw = presign_url(ENDPOINT, request, credentials, PathStyle.RAW, fixed_clock)

        assert self._query(escaped)["Signature"] != self._query(raw)["Signature"]
        assert urlsplit(escaped).path == "/bucket/my%20key.txt"
        assert urlsplit(raw).path == "/bucket/my%20key.txt"

    def test_raw_url_encodes_bytes_invalid_in_urls(self, credentials):
        """RAW prints a valid URL but signs the literal key."""
        request = PresignRequest(HttpMethod.GET, "bucket/a b%c+d", "", timedelta(hours=1))

        url = presign_url(ENDPOINT, request, credentials, PathStyle.RAW, fixed_clock)

        expected = reference_signature("SECRET", f"GET\n\n\n{NOW + 3600}\n/bucket/a b%c+d")
        assert " " not in url
        assert urlsplit(url).path == "/bucket/a%20b%25c+d"
        assert self._query(url)["Signature"] == [expected]

    def test_raw_keeps_endpoint_query(self, credentials):
        """RAW with a query on the endpoint keeps the path and the query."""
        request = PresignRequest(HttpMethod.GET, "bucket/key", "", timedelta(hours=1))

        url = presign_url(
            "http://host:9000/s3?tenant=alpha", request, credentials, PathStyle.RAW, fixed_clock
        )

        expected = reference_signature("SECRET", f"GET\n\n\n{NOW + 3600}\n/s3/bucket/key")
        assert urlsplit(url).path == "/s3/bucket/key"
        assert self._query(url)["tenant"] == ["alpha"]
        assert self._query(url)["Signature"] == [expected]

    def test_raw_signs_requested_path(self, credentials):
        """RAW should sign exactly the path placed in the URL."""
        request = PresignRequest(HttpMethod.GET, "bucket/a+b", "", timedelta(hours=1))

        url = presign_url(ENDPOINT, request, credentials, PathStyle.RAW, fixed_clock)

        expected = reference_signature("SECRET", f"GET\n\n\n{NOW + 3600}\n/bucket/a+b")
        assert urlsplit(url).path == "/bucket/a+b"
        assert self._query(url)["Signature"] == [expected]

    @pytest.mark.parametrize("bucket_key", ["", "/bucket/key"])
    @pytest.mark.parametrize("path_style", [PathStyle.ESCAPED, PathStyle.RAW])
    def test_invalid_bucket_key_fails_before_credentials(self, bucket_key, path_style):
        """Bad bucket/key should fail without consulting credentials."""
        provider = Mock()
        request = PresignRequest(HttpMethod.GET, bucket_key)

        with pytest.raises(InvalidArgument):
            presign_url(ENDPOINT, request, provider, path_style, fixed_clock)

        provider.retrieve.assert_not_called()

    def test_invalid_endpoint(self, credentials):
        """An unparseable endpoint should be InvalidEndpoint."""
        request = PresignRequest(HttpMethod.GET, "bucket/key")

        with pytest.raises(InvalidEndpoint):
            presign_url("localhost:9020", request, credentials, clock=fixed_clock)

    def test_credentials_unavailable_propagates(self):
        """Credential failures should surface unchanged."""
        provider = Mock()
        provider.retrieve.side_effect = CredentialsUnavailable("no keys")
        request = PresignRequest(HttpMethod.GET, "bucket/key")

        with pytest.raises(CredentialsUnavailable, match="no keys"):
            presign_url(ENDPOINT, request, provider, clock=fixed_clock)

    def test_string_method_in_request(self, credentials):
        """A plain string method should be accepted."""
        request = PresignRequest("head", "bucket/key", "", timedelta(hours=1))

        url = presign_url(ENDPOINT, request, credentials, clock=fixed_clock)

        expected = reference_signature("SECRET", f"HEAD\n\n\n{NOW + 3600}\n/bucket/key")
        assert self._query(url)["Signature"] == [expected]


class TestPresigner:
    """Tests for the Presigner wrapper."""

    def test_uses_bound_endpoint_and_clock(self):
        """Presigner should delegate with its endpoint, provider and clock."""
        presigner = Presigner(ENDPOINT, StaticCredentialProvider("AKID", "SECRET"), clock=fixed_clock)
        request = PresignRequest(HttpMethod.GET, "bucket/key", "", timedelta(hours=1))

        url = presigner.presign(request)

        assert url == presign_url(
            ENDPOINT, request, StaticCredentialProvider("AKID", "SECRET"), clock=fixed_clock
        )

    def test_retrieves_credentials_each_call(self):
        """Credentials are fetched on every presign, never cached."""
        provider = Mock()
        provider.retrieve.return_value = StaticCredentialProvider("AKID", "SECRET").retrieve()
        presigner = Presigner(ENDPOINT, provider, clock=fixed_clock)
        request = PresignRequest(HttpMethod.GET, "bucket/key")

        presigner.presign(request)
        presigner.presign(request)

        assert provider.retrieve.call_count == 2
