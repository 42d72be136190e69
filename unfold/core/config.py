"""Runtime settings for unfold."""

from typing import FrozenSet

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``UNFOLD_*`` environment variables or ``.env``."""

    # Naming
    output_suffix: str = "_unfolded"
    report_filename: str = "documentation.md"

    # OS artifacts that never produce a file (exact, case-sensitive match)
    ignored_names: FrozenSet[str] = Field(
        default=frozenset({".DS_Store", "Thumbs.db", "desktop.ini"})
    )

    # Directories that are never walked and reject the run at top level
    disallowed_dir_names: FrozenSet[str] = Field(
        default=frozenset({"node_modules"})
    )

    # Emit a progress event every N files (the last file always reports)
    progress_every: int = Field(default=10, ge=1)

    # Threads listing directories concurrently
    walker_workers: int = Field(default=8, ge=1)

    # zlib level for the optional archive
    zip_compression_level: int = Field(default=9, ge=0, le=9)

    model_config = SettingsConfigDict(
        env_prefix="UNFOLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def output_path_for(self, source_root):
        """Return the flattened output directory for ``source_root``."""
        return source_root.with_name(f"{source_root.name}{self.output_suffix}")

    def archive_path_for(self, source_root):
        """Return the archive path placed in ``source_root``'s parent."""
        return source_root.parent / f"{source_root.name}{self.output_suffix}.zip"


# Global settings instance
settings = Settings()
