"""File storage through the backend API."""

import json
import mimetypes
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..constants import API_ENDPOINTS
from ..exceptions import InvalidValueError, StorageError
from ..schema import StorageFile, UploadResult
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["STORAGE"]


class StorageClient(ServiceClient):
    error_class = StorageError

    def upload(
        self,
        content: bytes,
        path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> UploadResult:
        """Upload `content` to `path` as a multipart form.

        The content type is guessed from the path when not given.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        if not isinstance(content, (bytes, bytearray)):
            raise InvalidValueError("Upload content must be bytes", type=type(content).__name__)
        if not path:
            raise InvalidValueError("Upload path must be a non-empty string", path=path)
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        filename = path.rsplit("/", 1)[-1]
        form: Dict[str, Any] = {"path": path}
        if metadata:
            form["metadata"] = json.dumps(metadata)

        body = self._http.post(
            _ENDPOINTS["UPLOAD"],
            data=form,
            files={"file": (filename, bytes(content), content_type)},
        )
        data = self._unwrap(body, "upload") or {}
        self.logger.debug("File uploaded: %s", path)
        if isinstance(data, dict):
            data.setdefault("key", path)
        return UploadResult.model_validate(data)

    def get_file(self, path: str) -> StorageFile:
        body = self._http.get(_ENDPOINTS["FILE"], params={"path": path})
        data = self._unwrap(body, "get_file") or {}
        if isinstance(data, dict):
            data.setdefault("key", path)
        return StorageFile.model_validate(data)

    def download(self, path: str) -> bytes:
        return self._http.request_raw("GET", _ENDPOINTS["DOWNLOAD"], params={"path": path})

    def delete(self, path: str) -> bool:
        body = self._http.delete(_ENDPOINTS["FILE"], params={"path": path})
        self._unwrap(body, "delete")
        self.logger.debug("File deleted: %s", path)
        return True

    def get_public_url(self, path: str) -> str:
        """Build the public URL of a file; no request is made."""
        return f"{self._http.base_url}{_ENDPOINTS['PUBLIC']}/{quote(path, safe='')}"

    def create_signed_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """Return a temporary URL for `path`.

        `expires_in` defaults to `STORAGE_SIGNED_URL_EXPIRY` seconds.
        """
        expires_in = expires_in or self.settings.STORAGE_SIGNED_URL_EXPIRY
        body = self._http.post(_ENDPOINTS["SIGNED_URL"], json={"path": path, "expiresIn": expires_in})
        data = self._unwrap(body, "create_signed_url")
        if isinstance(data, dict):
            url = data.get("signedUrl") or data.get("url")
        else:
            url = data
        if not url:
            raise StorageError("Response did not contain a signed URL", path=path)
        return url

    def list(self, prefix: Optional[str] = None) -> List[StorageFile]:
        body = self._http.get(_ENDPOINTS["LIST"], params={"prefix": prefix})
        data = self._unwrap(body, "list") or []
        if isinstance(data, dict):
            data = data.get("files") or data.get("items") or []
        return [StorageFile.model_validate(item) for item in data]
