import re
from urllib.parse import urlparse

from section_cloner.errors import ValidationError


def normalize_url(raw: str) -> str:
    """
    Trim, default to https://, and reject anything that is not a plausible
    public http(s) URL. Raises ValidationError with a user-facing message.
    """
    url = (raw or "").strip()
    if not url:
        raise ValidationError("URL is required")
    if not re.match(r"^https?://", url, re.IGNORECASE):
        if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", url):
            raise ValidationError("Only HTTP/HTTPS URLs are supported")
        url = "https://" + url

    parsed = urlparse(url)
    hostname = parsed.hostname or ""
    if not hostname:
        raise ValidationError("Invalid URL format. Please enter a valid URL like https://example.com")

    if "." not in hostname and hostname != "localhost":
        raise ValidationError(
            f'Invalid domain "{hostname}". Please enter a complete URL like "{hostname}.com"'
        )
    return url
