"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, no string-key
dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, pages_dir="site/pages")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Pages and templates
    pages_dir: str | Path = "pages"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Production
    workers: int = 0  # 0 = auto-detect from CPU count
    log_level: str = "info"
