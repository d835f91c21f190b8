"""URL Resolver - turns storage keys into retrievable addresses."""
import re

from ..errors import ConfigurationError

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


class URLResolver:
    """
    Pure key -> URL mapping.

    Keys that already carry a scheme are passed through unchanged; anything
    else is served from the content-delivery domain.
    """

    def __init__(self, content_delivery_domain: str):
        domain = (content_delivery_domain or "").strip()
        domain = _SCHEME_RE.sub("", domain).strip("/")
        if not domain:
            raise ConfigurationError("content delivery domain is not configured")
        self._domain = domain

    @property
    def domain(self) -> str:
        return self._domain

    def resolve(self, storage_key: str) -> str:
        if _SCHEME_RE.match(storage_key):
            return storage_key
        return f"https://{self._domain}/{storage_key}"
