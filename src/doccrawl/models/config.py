"""Pydantic configuration models for doccrawl."""

import re
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field, field_validator

from .documents import CrawlTarget, FilterRule

DEFAULT_IGNORE_SELECTORS = (
    "script",
    "style",
    "iframe",
    "svg",
    "button",
    ".ad",
    ".advertisement",
    ".banner",
    ".cookie-banner",
    ".newsletter-signup",
)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; DocumentationCrawler/1.0)"


def _check_selector(selector: str) -> str:
    """Raise ValueError if selector is not valid CSS."""
    try:
        BeautifulSoup("", "html.parser").select(selector)
    except Exception as err:
        raise ValueError(f"Invalid CSS selector {selector!r}: {err}") from err
    return selector


class CrawlConfig(BaseModel):
    """Configuration for link following and request pacing."""

    max_depth: int = Field(10, ge=1, description="Maximum link depth from the start URL")
    delay_ms: int = Field(100, ge=0, description="Delay between requests in milliseconds")
    restrict_to_domain: bool = Field(True, description="Only follow links on the start URL's host")
    path_pattern: Optional[str] = Field(
        None,
        description="Regex that URL paths must match to be followed (e.g. '^/docs/.*')",
    )

    model_config = {"extra": "forbid"}

    @field_validator("path_pattern")
    @classmethod
    def _compile_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as err:
            raise ValueError(f"Invalid path pattern regex {v!r}: {err}") from err
        return v

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0


class ConversionConfig(BaseModel):
    """
    Content extraction and conversion settings.

    Immutable for the duration of a run. ignore_selectors accepts either a
    sequence or a comma-separated string; order is kept and duplicates are
    dropped.
    """

    selector: str = Field("main", min_length=1, description="CSS selector for the main content")
    ignore_selectors: tuple[str, ...] = Field(
        DEFAULT_IGNORE_SELECTORS,
        description="CSS selectors for elements to drop from the content",
    )
    strip_inline_handlers: bool = Field(True, description="Remove inline on* event handler attributes")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("selector")
    @classmethod
    def _validate_selector(cls, v: str) -> str:
        return _check_selector(v.strip())

    @field_validator("ignore_selectors", mode="before")
    @classmethod
    def _split_selectors(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            seen: dict[str, None] = {}
            for item in v:
                selector = str(item).strip()
                if selector:
                    seen.setdefault(_check_selector(selector), None)
            return tuple(seen)
        return v


class OutputConfig(BaseModel):
    """Configuration for where markdown and intermediate files go."""

    directory: Path = Field(Path("./docs"), description="Output directory for markdown files")
    workspace_name: str = Field(
        ".crawl",
        min_length=1,
        description="Name of the temporary fetch workspace inside the output directory",
    )

    model_config = {"extra": "forbid"}


class NetworkConfig(BaseModel):
    """Configuration for HTTP client behavior."""

    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")
    max_retries: int = Field(3, ge=0, description="Maximum retry attempts for failed requests")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")

    model_config = {"extra": "forbid"}


class DocCrawlConfig(BaseModel):
    """
    Root configuration model for doccrawl.

    Example:
        config = DocCrawlConfig(
            url="https://example.com/docs/",
            crawl={"path_pattern": "^/docs/.*"},
            conversion={"selector": "main", "ignore_selectors": "script,style"},
        )

    YAML format:
        url: https://example.com/docs/
        crawl:
          delay_ms: 250
          path_pattern: ^/docs/.*
        conversion:
          selector: article
        output:
          directory: ./my-docs
    """

    url: str = Field(..., description="Start URL")

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")
    dry_run: bool = Field(False, description="Convert pages without writing markdown files")

    model_config = {"extra": "forbid"}

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        v = v.strip()
        try:
            parsed = urlparse(v)
            host = parsed.hostname
        except ValueError as err:
            raise ValueError(f"Invalid URL provided: {v!r}") from err
        if parsed.scheme not in ("http", "https") or not host:
            raise ValueError(f"Invalid URL provided: {v!r}")
        return v

    @property
    def target(self) -> CrawlTarget:
        """The start URL split into its components."""
        return CrawlTarget.parse(self.url)

    @property
    def base_domain(self) -> str:
        """Hostname of the start URL."""
        return self.target.host

    @property
    def filter_rule(self) -> FilterRule:
        """Compiled link acceptance rule."""
        pattern = re.compile(self.crawl.path_pattern) if self.crawl.path_pattern else None
        return FilterRule(
            restrict_to_base_domain=self.crawl.restrict_to_domain,
            path_pattern=pattern,
        )

    @property
    def workspace_dir(self) -> Path:
        """Temporary directory holding fetched HTML."""
        return self.output.directory / self.output.workspace_name

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "DocCrawlConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "DocCrawlConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
