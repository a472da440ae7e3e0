"""Configuration models describing Collect settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CollectBaseModel(BaseModel):
    """Shared configuration for Collect settings models."""

    model_config = ConfigDict(extra="forbid")


class LibrarySettings(CollectBaseModel):
    """Where the library lives and which files belong to it.

    Attributes:
        source_directory: Root directory scanned for documents.
        data_dir: Directory holding per-library metadata, indexes, and logs.
        extension: File extension (without dot) treated as a library document.
        follow_symlinks: Whether the scanner descends into symlinked entries.
    """

    source_directory: Optional[str] = None
    data_dir: str = "~/.collect"
    extension: str = "pdf"
    follow_symlinks: bool = False


class IdentitySettings(CollectBaseModel):
    """Settings for the file identity marker.

    Attributes:
        backend: Marker mechanism; ``auto`` picks extended attributes where supported.
        marker_name: Namespaced attribute name carrying the identifier.
    """

    backend: Literal["auto", "xattr", "sidecar"] = "auto"
    marker_name: str = "com.collect.fileid"


class IndexSettings(CollectBaseModel):
    """Defaults for library views.

    Attributes:
        recent_days: Trailing window, in days, for the recent view.
        default_sort: Sort option applied when none is selected.
        recent_limit: Number of entries shown in last-opened/last-added lists.
    """

    recent_days: int = 7
    default_sort: str = "Recently Opened"
    recent_limit: int = 3


class DownloadSettings(CollectBaseModel):
    """Options for the HTTP downloader.

    Attributes:
        timeout_seconds: Connect/read timeout applied to each request.
        user_agent: User-Agent header sent with download requests.
    """

    timeout_seconds: float = 30.0
    user_agent: str = "collect/0.1"


class LoggingSettings(CollectBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(CollectBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class CollectConfig(CollectBaseModel):
    """Top-level configuration struct for Collect.

    Attributes:
        library: Library location and scanning settings.
        identity: Identity marker settings.
        index: View defaults.
        download: Downloader settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    library: LibrarySettings = Field(default_factory=LibrarySettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    download: DownloadSettings = Field(default_factory=DownloadSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CollectBaseModel",
    "LibrarySettings",
    "IdentitySettings",
    "IndexSettings",
    "DownloadSettings",
    "LoggingSettings",
    "CLIOptions",
    "CollectConfig",
]
