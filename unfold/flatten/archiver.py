"""
ZIP packaging of a completed output directory.
"""

import logging
import os
import zipfile
from pathlib import Path
from typing import Optional

from ..core.config import Settings
from ..core.config import settings as default_settings

logger = logging.getLogger(__name__)


def create_zip_archive(
    source_dir: Path, zip_path: Path, settings: Optional[Settings] = None
) -> Path:
    """
    Package ``source_dir`` into a compressed archive.

    The directory's contents sit at the archive root, without an enclosing
    folder. The archive is written to a temporary file next to ``zip_path``
    and renamed into place once complete.

    Args:
        source_dir: Directory to package
        zip_path: Final archive path
        settings: Settings providing the compression level

    Returns:
        The archive path

    Raises:
        OSError, zipfile.BadZipFile: If the archive cannot be written
    """
    settings = settings or default_settings
    temp_zip_path = zip_path.with_name(f".{zip_path.name}.partial")
    file_count = 0

    try:
        with zipfile.ZipFile(
            temp_zip_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=settings.zip_compression_level,
            allowZip64=True,
        ) as bundle:
            for root, dirs, files in os.walk(source_dir):
                dirs.sort()
                for name in sorted(files):
                    file_path = Path(root) / name
                    arcname = file_path.relative_to(source_dir)
                    bundle.write(file_path, arcname=arcname.as_posix())
                    file_count += 1

        os.replace(temp_zip_path, zip_path)
    except BaseException:
        if temp_zip_path.exists():
            temp_zip_path.unlink()
        raise

    logger.info(
        f"Zip archive created: {zip_path} "
        f"({file_count} files, {zip_path.stat().st_size} total bytes)"
    )
    return zip_path
