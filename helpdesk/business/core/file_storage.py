"""
Local filesystem object storage for uploaded images, signatures and receipt photos

Files live under UPLOAD_FOLDER in one sub-folder per kind (assets/, users/,
signatures/, ...). The public URL of a stored file is PUBLIC_UPLOAD_URL plus
its relative key, and is what gets saved on the owning record.
"""

from __future__ import annotations

import base64
import binascii
import re
import uuid
from datetime import datetime
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from helpdesk.business.core.errors import StorageError, ValidationError
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.core.file_storage")

DATA_URL_PATTERN = re.compile(r'^data:(?P<mime>[\w/+.-]+);base64,(?P<payload>.+)$', re.DOTALL)

MIME_EXTENSIONS = {
    'image/png': '.png',
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/gif': '.gif',
    'image/webp': '.webp',
    'image/svg+xml': '.svg',
}


class LocalFileStore:
    """Stores files on disk and maps them to public URLs"""

    ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.svg'}

    def __init__(self, root, public_url='/uploads'):
        self.root = Path(root)
        self.public_url = public_url.rstrip('/')

    @classmethod
    def from_config(cls) -> 'LocalFileStore':
        return cls(current_app.config['UPLOAD_FOLDER'], current_app.config.get('PUBLIC_UPLOAD_URL', '/uploads'))

    @classmethod
    def is_allowed_image(cls, filename: str | None) -> bool:
        if not filename:
            return False
        return Path(filename).suffix.lower() in cls.ALLOWED_IMAGE_EXTENSIONS

    def _new_key(self, folder: str, filename: str) -> str:
        stamp = datetime.utcnow().strftime('%Y%m%d%H%M%S')
        safe_name = secure_filename(filename) or 'file'
        return f"{folder}/{stamp}_{uuid.uuid4().hex[:8]}_{safe_name}"

    def url_for_key(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def key_for_url(self, url: str | None) -> str | None:
        """Reverse of url_for_key; None for URLs this store did not issue"""
        if not url or not url.startswith(self.public_url + '/'):
            return None
        key = url[len(self.public_url) + 1:]
        if '..' in Path(key).parts:
            return None
        return key

    def path_for_key(self, key: str) -> Path:
        return self.root / key

    def save_bytes(self, data: bytes, folder: str, filename: str) -> str:
        """Write raw bytes and return the public URL"""
        if not data:
            raise ValidationError("Uploaded file is empty")

        key = self._new_key(folder, filename)
        path = self.path_for_key(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write upload {key}: {e}")
            raise StorageError(f"Failed to store file: {e}")

        logger.info(f"Stored file {key} ({len(data)} bytes)")
        return self.url_for_key(key)

    def save_upload(self, upload: FileStorage | None, folder: str, images_only: bool = True) -> str:
        """Store a multipart upload from request.files"""
        if upload is None or not upload.filename:
            raise ValidationError("No file selected")
        if images_only and not self.is_allowed_image(upload.filename):
            raise ValidationError("Only image files are allowed")
        return self.save_bytes(upload.read(), folder, upload.filename)

    def save_data_url(self, data_url: str | None, folder: str, name: str = 'image') -> str:
        """Store a base64 data URL such as a signature pad or camera capture"""
        match = DATA_URL_PATTERN.match((data_url or '').strip())
        if not match:
            raise ValidationError("Image data is missing or not a base64 data URL")

        extension = MIME_EXTENSIONS.get(match.group('mime').lower())
        if extension is None:
            raise ValidationError(f"Unsupported image type: {match.group('mime')}")

        try:
            data = base64.b64decode(match.group('payload'), validate=False)
        except (binascii.Error, ValueError) as e:
            raise StorageError(f"Could not decode image data: {e}")

        return self.save_bytes(data, folder, f"{name}{extension}")

    def delete(self, url: str | None) -> bool:
        """Remove a stored file; returns False when there was nothing to remove"""
        key = self.key_for_url(url)
        if key is None:
            return False

        path = self.path_for_key(key)
        try:
            if path.exists():
                path.unlink()
                logger.info(f"Deleted stored file {key}")
                return True
        except OSError as e:
            logger.warning(f"Could not delete stored file {key}: {e}")
        return False


def get_file_store() -> LocalFileStore:
    return LocalFileStore.from_config()
