"""Configuration management with Pydantic models."""

import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """Output document format (value doubles as the file extension)."""

    MARKDOWN = "md"
    HTML = "html"
    TEXT = "txt"


DEFAULT_CALLOUT_MAPPING: dict[str, str] = {
    "note": "note",
    "info": "info",
    "warning": "warning",
    "example": "example",
    "abstract": "abstract",
    "tip": "tip",
}


class FetcherConfig(BaseModel):
    """Configuration for page fetching."""

    use_js: bool = False
    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    # Fixed wait before the single retry of a 429 response
    rate_limit_backoff_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    wait_selector: str | None = None
    page_pool_size: int = Field(default=1, ge=1, le=5)


class ExtractorConfig(BaseModel):
    """Configuration for content region extraction."""

    content_selectors: list[str] = Field(
        default_factory=lambda: [
            "div.module-content",
            "div.training-module",
            "div.modal-body",
            "article",
        ]
    )
    cleanup_selectors: list[str] = Field(
        default_factory=lambda: [
            "#pwnboxSwitchWarningModal",
            "#solutionsModuleSetting",
            "#statusText",
            "#vpn-switch",
            ".vpnSelector",
            ".pwnbox-select-card",
            "#screen",
            "#questionsDiv",
            ".footer",
            "canvas",
            ".instance-button",
            ".terminateInstanceBtn",
        ]
    )


class DiscoveryConfig(BaseModel):
    """Configuration for expanding course pages into section URLs."""

    course_path_pattern: str = r"/courses?/"
    section_link_selector: str = 'a[href*="/module/"][href*="/section/"]'


class RateLimitConfig(BaseModel):
    """Configuration for pacing and failure tolerance."""

    delay_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    failure_threshold: int = Field(default=3, ge=1, le=100)
    pause_poll_seconds: float = Field(default=0.1, gt=0.0, le=5.0)


class RenderConfig(BaseModel):
    """Rendering options for one run. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    formats: list[OutputFormat] = Field(
        default_factory=lambda: [OutputFormat.MARKDOWN], min_length=1
    )
    callouts: bool = True
    callout_mapping: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CALLOUT_MAPPING)
    )
    embed_images: bool = True
    pipe_tables: bool = True
    include_metadata: bool = True
    metadata: dict[str, str | list[str]] = Field(
        default_factory=lambda: {
            "tags": ["htb-academy", "cybersecurity"],
            "source": "HTB Academy Scraper",
        }
    )
    # Adds a clock-derived "created" key to the front matter
    include_timestamp: bool = False

    def callout_token(self, kind: str) -> str:
        """Callout token for a section kind, falling back to the note token."""
        return self.callout_mapping.get(
            kind, self.callout_mapping.get("note", DEFAULT_CALLOUT_MAPPING["note"])
        )


class RunConfig(BaseModel):
    """Main run configuration."""

    credential: str = ""
    output_dir: Path = Path("./output")
    allowed_host: str = "academy.hackthebox.com"
    session_cookie_name: str = "htb_academy_session"
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "RunConfig":
        """Load config from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)
