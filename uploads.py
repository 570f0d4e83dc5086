"""
Project image uploads: stores multipart files under UPLOAD_DIR and maps the
public paths recorded on projects back to files for listing and download.
"""

import os
import re
import shutil
import time
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Depends, UploadFile

from config import Settings, get_settings
from errors import ValidationError
from logging_config import get_logger

logger = get_logger("uploads")

_WHITESPACE = re.compile(r"\s+")


def safe_filename(filename: str) -> str:
    name = os.path.basename(filename.replace("\\", "/"))
    return _WHITESPACE.sub("_", name)


class UploadStore:
    def __init__(self, directory: str, url_prefix: str = "/projects", max_files: int = 9):
        self.directory = directory
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_files = max_files

    def save(self, uploads: Sequence[UploadFile]) -> List[str]:
        """Write the files and return their public paths, in upload order."""
        uploads = [upload for upload in uploads if upload.filename]
        if len(uploads) > self.max_files:
            raise ValidationError(f"At most {self.max_files} images can be uploaded at once", fields=["images"])
        if not uploads:
            return []

        os.makedirs(self.directory, exist_ok=True)
        paths = []
        for upload in uploads:
            stored_name = self._unique_name(f"{int(time.time() * 1000)}_{safe_filename(upload.filename)}")
            with open(os.path.join(self.directory, stored_name), "wb") as out:
                shutil.copyfileobj(upload.file, out)
            paths.append(f"{self.url_prefix}/{stored_name}")
        logger.info("Stored %d uploaded image(s)", len(paths))
        return paths

    def _unique_name(self, name: str) -> str:
        candidate = name
        stem, ext = os.path.splitext(name)
        counter = 1
        while os.path.exists(os.path.join(self.directory, candidate)):
            candidate = f"{stem}_{counter}{ext}"
            counter += 1
        return candidate

    # Project files
    def project_files(self, project: Dict[str, Any], base_url: str) -> List[Dict[str, str]]:
        """``image`` then ``images``, without repeats, as name/path/url entries."""
        files: List[Dict[str, str]] = []
        seen = set()
        candidates = [project.get("image")] + list(project.get("images") or [])
        for path in candidates:
            if not path or path in seen:
                continue
            seen.add(path)
            normalized = path if path.startswith("/") else "/" + path
            files.append({
                "name": path.rsplit("/", 1)[-1] or "image.jpg",
                "path": path,
                "url": base_url.rstrip("/") + normalized,
            })
        return files

    def resolve_file(self, project: Dict[str, Any], filename: str) -> Optional[str]:
        """Local path of a file recorded on the project, if it exists on disk."""
        candidates = [project.get("image")] + list(project.get("images") or [])
        for path in candidates:
            if not path or path.rsplit("/", 1)[-1] != filename:
                continue
            local = self._local_path(path)
            if local is not None:
                return local
        return None

    def discard(self, paths: Sequence[str]) -> None:
        """Delete files stored by ``save`` that ended up unused."""
        for path in paths:
            local = self._local_path(path)
            if local is None:
                continue
            try:
                os.remove(local)
            except OSError as exc:
                logger.warning("Could not remove unused upload %s: %s", local, exc)
        if paths:
            logger.info("Discarded %d unused upload(s)", len(paths))

    def _local_path(self, path: str) -> Optional[str]:
        """Existing file under ``directory`` for a public path, else None."""
        relative = path
        if relative.startswith(self.url_prefix + "/"):
            relative = relative[len(self.url_prefix) + 1:]
        local = os.path.realpath(os.path.join(self.directory, relative.lstrip("/")))
        root = os.path.realpath(self.directory)
        if local.startswith(root + os.sep) and os.path.isfile(local):
            return local
        return None


def get_upload_store(settings: Settings = Depends(get_settings)) -> UploadStore:
    return UploadStore(settings.upload_dir, settings.upload_url_prefix, settings.max_upload_images)
