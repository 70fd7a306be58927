import os
import re

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

# Hostnames accepted for a MediaWiki site (eg. en.wikipedia.org)
VALID_HOSTNAME_REGEX = re.compile(
    r"^(([a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9\-]*[a-zA-Z0-9])\.)*"
    r"([A-Za-z0-9]|[A-Za-z0-9][A-Za-z0-9\-]*[A-Za-z0-9])$"
)


class SearchConfig(BaseModel):
    """Tunables for batching and the low-yield demotion policy."""

    # Batch packing limits imposed by the MediaWiki API
    max_batch_titles: int = Field(50, ge=1, description="Maximum titles per remote request")
    max_encoded_length: int = Field(1500, ge=1, description="Upper bound (exclusive) on the encoded titles parameter")

    # Yield policy
    low_yield_threshold: int = Field(10, ge=0, description="Steps inserting fewer new titles than this are low-yield")
    low_yield_limit: int = Field(4, ge=1, description="Consecutive low-yield steps before every active batch is parked")

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Create config from environment variables."""
        return cls(
            max_batch_titles=int(os.getenv("WIKI_BRIDGE_MAX_BATCH_TITLES", "50")),
            max_encoded_length=int(os.getenv("WIKI_BRIDGE_MAX_ENCODED_LENGTH", "1500")),
            low_yield_threshold=int(os.getenv("WIKI_BRIDGE_LOW_YIELD_THRESHOLD", "10")),
            low_yield_limit=int(os.getenv("WIKI_BRIDGE_LOW_YIELD_LIMIT", "4")),
        )


class WikiConfig(BaseModel):
    """Configuration for the remote MediaWiki link source."""

    hostname: str = "en.wikipedia.org"
    timeout_seconds: float = Field(5.0, gt=0, description="Maximum wait for a single API request")
    user_agent: str = "wiki-bridge/0.1 (bidirectional link path finder)"

    @field_validator("hostname")
    @classmethod
    def hostname_must_be_valid(cls, v: str):
        v = v.strip().lower()
        if not VALID_HOSTNAME_REGEX.match(v):
            raise ValueError(f"Invalid hostname: '{v}'")
        return v

    @property
    def api_url(self) -> str:
        return f"https://{self.hostname}/w/api.php"

    @classmethod
    def from_env(cls) -> "WikiConfig":
        """Create config from environment variables."""
        return cls(
            hostname=os.getenv("WIKI_BRIDGE_HOSTNAME", "en.wikipedia.org"),
            timeout_seconds=float(os.getenv("WIKI_BRIDGE_TIMEOUT", "5.0")),
            user_agent=os.getenv("WIKI_BRIDGE_USER_AGENT", "wiki-bridge/0.1 (bidirectional link path finder)"),
        )


class ApiConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("WIKI_BRIDGE_API_HOST", "0.0.0.0"),
            port=int(os.getenv("WIKI_BRIDGE_API_PORT", "8000")),
            log_level=os.getenv("WIKI_BRIDGE_LOG_LEVEL", "INFO"),
        )
