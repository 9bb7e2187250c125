"""URL normalization at the API boundary."""

import pytest

from section_cloner.errors import ValidationError
from section_cloner.validators import normalize_url


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://example.com", "https://example.com"),
            ("  http://example.com/pricing  ", "http://example.com/pricing"),
            ("example.com", "https://example.com"),
            ("www.example.co.uk/a?b=1", "https://www.example.co.uk/a?b=1"),
            ("http://localhost:3000", "http://localhost:3000"),
            ("HTTPS://Example.com", "HTTPS://Example.com"),
        ],
    )
    def test_accepted(self, raw, expected) -> None:
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing(self, raw) -> None:
        with pytest.raises(ValidationError, match="URL is required"):
            normalize_url(raw)

    @pytest.mark.parametrize("raw", ["ftp://example.com", "file:///etc/passwd"])
    def test_non_http_schemes(self, raw) -> None:
        with pytest.raises(ValidationError, match="Only HTTP/HTTPS"):
            normalize_url(raw)

    def test_bare_word_domain(self) -> None:
        with pytest.raises(ValidationError, match='Invalid domain "example"'):
            normalize_url("example")

    def test_no_host(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_url("https://")

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "VALIDATION_ERROR"
