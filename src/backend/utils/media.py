# src/backend/utils/media.py

import os
import re
import time
import logging
from pathlib import Path
from typing import Optional, Union

from src.backend.utils.exceptions import PhotoCleanupError, StorageError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def normalize_url_prefix(prefix: str) -> str:
    """
    "/uploads/" -> "/uploads"
    """
    return "/" + (prefix or "").strip().strip("/")


MAX_NAME_LENGTH = 150   # sanitized part only; "<millis>-<n>-" is added on top
MAX_EXT_LENGTH = 16


def safe_filename(original_name: Optional[str]) -> str:
    # keep only the base name; anything odd becomes "_"
    name = os.path.basename((original_name or "").replace("\\", "/")).strip()
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).lstrip(".")
    if not name:
        return "photo"

    # ASCII only at this point, so length == bytes
    stem, ext = os.path.splitext(name)
    if len(ext) > MAX_EXT_LENGTH:
        stem, ext = name, ""
    return stem[: MAX_NAME_LENGTH - len(ext)] + ext


class PhotoStore:
    """
    Owns the upload directory and the "/uploads/<filename>" references
    stored in Employee.photo.

    Files are named "<epoch-millis>-<original name>" and never overwrite an
    existing file. Removal is best-effort: it never raises.
    """

    def __init__(self, upload_dir: Union[str, Path], url_prefix: str = "/uploads"):
        self.root = Path(upload_dir).resolve()
        self.url_prefix = normalize_url_prefix(url_prefix)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    # ---------------------------------------------------------
    # SAVE
    # ---------------------------------------------------------
    def store(self, data: bytes, original_name: Optional[str]) -> str:
        """
        Write the uploaded bytes under a fresh unique name and return the
        public reference, e.g. "/uploads/1712345678901-avatar.png".
        """
        folder = self.ensure_root()
        base = safe_filename(original_name)
        stamp = int(time.time() * 1000)

        attempt = 0
        while True:
            filename = f"{stamp}-{base}" if attempt == 0 else f"{stamp}-{attempt}-{base}"
            file_path = folder / filename
            try:
                # "x" refuses to clobber a file that appeared in the meantime
                with open(file_path, "xb") as fh:
                    fh.write(data)
                break
            except FileExistsError:
                attempt += 1
            except OSError as e:
                logger.exception("Failed to write photo file %s: %s", file_path, e)
                raise StorageError(f"Could not save photo {filename}") from e

        logger.info("Saved photo file: %s (%d bytes)", file_path, len(data))
        return f"{self.url_prefix}/{filename}"

    # ---------------------------------------------------------
    # RESOLVE
    # ---------------------------------------------------------
    def path_for(self, reference: Optional[str]) -> Optional[Path]:
        """
        Map "/uploads/<filename>" to a file inside the upload directory.
        Returns None for empty, foreign or escaping references.
        """
        if not reference:
            return None

        ref = reference.split("?", 1)[0]
        if not ref.startswith(self.url_prefix + "/"):
            return None

        rel_path = ref[len(self.url_prefix):].lstrip("/")
        if not rel_path:
            return None

        full_path = (self.root / rel_path).resolve()
        if full_path.parent != self.root:
            return None
        return full_path

    # ---------------------------------------------------------
    # DELETE (best-effort)
    # ---------------------------------------------------------
    def _unlink(self, full_path: Path) -> None:
        try:
            full_path.unlink()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise PhotoCleanupError(f"Error deleting photo file {full_path}: {e}") from e

    def remove(self, reference: Optional[str]) -> bool:
        """
        Delete the file behind a photo reference.

        Empty references and already-missing files are a no-op. Failures are
        logged and swallowed so the owning record operation still succeeds.
        Returns True only when a file was actually removed.
        """
        if not reference:
            return False

        full_path = self.path_for(reference)
        if full_path is None:
            logger.warning("Ignoring photo reference outside %s: %r", self.url_prefix, reference)
            return False

        try:
            self._unlink(full_path)
        except FileNotFoundError:
            logger.warning("Delete requested but photo file not found: %s", full_path)
            return False
        except PhotoCleanupError as e:
            logger.error("%s", e)
            return False

        logger.info("Deleted photo file: %s", full_path)
        return True
