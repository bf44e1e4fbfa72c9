import time

from pydantic import Field

from ..discovery.parser import get_header, headers
from .common import FrozenPydanticModel


class CacheEntry(FrozenPydanticModel):
    """One received discovery response, stored as its verbatim decoded text.

    Header values are not stored separately; they are looked up in `message`
    on demand.
    """
    message: str
    source_host: str | None = None # None for messages injected without a sender
    source_port: int | None = None
    received_at: float = Field(default_factory=time.time)

    def get(self, name: str) -> str | None:
        """Value of the first `<name>:` header line, or None."""
        return get_header(self.message, name)

    @property
    def usn(self) -> str | None:
        return self.get("USN")

    def headers(self) -> dict[str, str]:
        return headers(self.message)
