"""
Authenticated client for the remote file API.

Every call is a single HTTP round trip with no automatic retry; timeouts
and retry policy belong to the transport and to callers. Non-2xx responses
raise RemoteError carrying the remote body text, except for revision
conflicts on update, which come back as a tagged UpdateResult.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config.settings import NoteSyncConfig
from ..exceptions import PathOutsideSandboxError, RemoteError
from .models import (
    Account,
    ListFolderPage,
    RemoteEntry,
    RevisionedFile,
    UpdateResult,
    UpdateStatus,
    UploadResult,
)
from .paths import is_contained, sanitize

logger = logging.getLogger(__name__)

API_ARG_HEADER = "Dropbox-API-Arg"
API_RESULT_HEADER = "Dropbox-API-Result"


def encode_api_arg(arg: Dict[str, Any]) -> str:
    """
    Serialize a header argument as JSON safe for an HTTP header.

    Non-ASCII characters (and DEL) are written as \\uXXXX escapes.
    """
    return json.dumps(arg, ensure_ascii=True, separators=(",", ":")).replace(
        "\x7f", "\\u007f"
    )


def to_api_path(path: Optional[str]) -> str:
    """The store's root is the empty string; a lone "/" is rejected remotely."""
    if not path or path == "/":
        return ""
    return path


class RemoteFileClient:
    """
    Client for listing, reading and writing files in the remote store.

    Write operations only accept paths inside the sandbox root and always
    send the sanitized path. With no root set, every write is refused.
    """

    def __init__(
        self,
        config: NoteSyncConfig,
        sandbox_root: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Application configuration (API hosts, timeout)
            sandbox_root: Vault folder that bounds every write
            http_client: Optional pre-built client (tests inject a mock transport)
        """
        self.config = config
        self.sandbox_root = sandbox_root
        self._http_client = http_client
        self._owns_http_client = http_client is None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.http_timeout)
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    def set_sandbox_root(self, sandbox_root: Optional[str]) -> None:
        self.sandbox_root = sandbox_root

    def guard_write_path(self, path: str) -> str:
        """
        Sanitize a write target and check it against the sandbox root.

        Raises:
            PathOutsideSandboxError: No root is set, or the sanitized path is outside it
        """
        safe_path = sanitize(path)
        if self.sandbox_root is None:
            logger.warning(f"Rejected write with no vault configured: {path!r}")
            raise PathOutsideSandboxError(path, None)
        if not is_contained(safe_path, self.sandbox_root):
            logger.warning(f"Rejected write outside vault: {path!r}")
            raise PathOutsideSandboxError(path, self.sandbox_root)
        return safe_path

    # =========================================================================
    # Listing
    # =========================================================================

    async def list_folder(
        self,
        access_token: str,
        path: str,
        recursive: bool = False,
    ) -> ListFolderPage:
        """Fetch the first page of a folder listing."""
        data = await self._rpc(
            access_token,
            "files/list_folder",
            {
                "path": to_api_path(path),
                "recursive": recursive,
                "include_media_info": False,
            },
            "Failed to list folder",
        )
        return ListFolderPage.from_dict(data)

    async def list_folder_continue(self, access_token: str, cursor: str) -> ListFolderPage:
        """Fetch the next page using the opaque cursor from the previous one."""
        data = await self._rpc(
            access_token,
            "files/list_folder/continue",
            {"cursor": cursor},
            "Failed to continue listing folder",
        )
        return ListFolderPage.from_dict(data)

    async def list_all_entries(self, access_token: str, path: str) -> List[RemoteEntry]:
        """
        List a folder recursively, following cursors until the last page.

        Entries are returned in the order the store sent them.
        """
        page = await self.list_folder(access_token, path, recursive=True)
        entries = list(page.entries)
        pages = 1

        while page.has_more:
            page = await self.list_folder_continue(access_token, page.cursor)
            entries.extend(page.entries)
            pages += 1

        logger.debug(f"Listed {len(entries)} entries under {path!r} in {pages} pages")
        return entries

    # =========================================================================
    # Reading
    # =========================================================================

    async def download_file(self, access_token: str, path: str) -> str:
        """Download a file as text."""
        response = await self._content(
            access_token, "files/download", {"path": path}, None, "Failed to download file"
        )
        return response.text

    async def download_with_metadata(self, access_token: str, path: str) -> RevisionedFile:
        """Download a file together with the revision the server reports for it."""
        response = await self._content(
            access_token, "files/download", {"path": path}, None, "Failed to download file"
        )

        try:
            metadata = json.loads(response.headers.get(API_RESULT_HEADER, "{}"))
        except ValueError as e:
            raise RemoteError("Failed to download file", f"Invalid result header: {e}") from e

        if not isinstance(metadata, dict) or not metadata.get("rev"):
            raise RemoteError("Failed to download file", "Response carried no revision")

        return RevisionedFile(
            content=response.content,
            rev=metadata["rev"],
            name=metadata.get("name", ""),
            path_display=metadata.get("path_display", path),
        )

    async def get_temporary_link(self, access_token: str, path: str) -> str:
        """Get a short-lived direct download link for a file."""
        data = await self._rpc(
            access_token,
            "files/get_temporary_link",
            {"path": path},
            "Failed to get temporary link",
        )
        return data["link"]

    async def get_current_account(self, access_token: str) -> Account:
        """Fetch the account that owns the access token."""
        data = await self._rpc(
            access_token,
            "users/get_current_account",
            None,
            "Failed to get account info",
        )
        return Account.from_dict(data)

    # =========================================================================
    # Writing
    # =========================================================================

    async def upload_file(self, access_token: str, path: str, content: str) -> UploadResult:
        """Create a new text file; never overwrites."""
        return await self.upload_binary(access_token, path, content.encode("utf-8"))

    async def upload_binary(self, access_token: str, path: str, data: bytes) -> UploadResult:
        """Create a new file from raw bytes; never overwrites."""
        safe_path = self.guard_write_path(path)
        response = await self._content(
            access_token,
            "files/upload",
            {"path": safe_path, "mode": "add"},
            data,
            "Failed to upload file",
        )
        logger.info(f"Uploaded {safe_path} ({len(data)} bytes)")
        return UploadResult.from_dict(self._json(response, "Failed to upload file"))

    async def update_file(
        self,
        access_token: str,
        path: str,
        content: Union[bytes, str],
        expected_rev: str,
    ) -> UpdateResult:
        """
        Overwrite a file only if its current revision is expected_rev.

        Returns an UpdateResult tagged SUCCESS with the new revision,
        CONFLICT when the server has a newer revision, or FAILED for any
        other error.

        Raises:
            PathOutsideSandboxError: The path is outside the vault root
        """
        safe_path = self.guard_write_path(path)
        if isinstance(content, str):
            content = content.encode("utf-8")

        arg = {"path": safe_path, "mode": {".tag": "update", "update": expected_rev}}
        try:
            response = await self._send_content(access_token, "files/upload", arg, content)
        except httpx.RequestError as e:
            logger.error(f"Update of {safe_path} failed: {e}")
            return UpdateResult(
                status=UpdateStatus.FAILED,
                path=safe_path,
                expected_rev=expected_rev,
                error=str(e),
            )

        if response.status_code == 409:
            logger.warning(f"Conflict updating {safe_path}: revision {expected_rev} is stale")
            return UpdateResult(
                status=UpdateStatus.CONFLICT,
                path=safe_path,
                expected_rev=expected_rev,
                error=response.text,
                status_code=409,
            )

        if not response.is_success:
            logger.error(f"Update of {safe_path} failed: {response.status_code} {response.text}")
            return UpdateResult(
                status=UpdateStatus.FAILED,
                path=safe_path,
                expected_rev=expected_rev,
                error=response.text,
                status_code=response.status_code,
            )

        try:
            data = self._json(response, "Failed to update file")
        except RemoteError as e:
            return UpdateResult(
                status=UpdateStatus.FAILED,
                path=safe_path,
                expected_rev=expected_rev,
                error=e.body,
                status_code=response.status_code,
            )

        logger.info(f"Updated {safe_path}: {expected_rev} -> {data.get('rev')}")
        return UpdateResult(
            status=UpdateStatus.SUCCESS,
            path=safe_path,
            expected_rev=expected_rev,
            rev=data.get("rev"),
            name=data.get("name"),
            path_display=data.get("path_display"),
            status_code=response.status_code,
        )

    async def move(self, access_token: str, from_path: str, to_path: str) -> RemoteEntry:
        """Move or rename an entry. Both ends must be inside the vault."""
        safe_from = self.guard_write_path(from_path)
        safe_to = self.guard_write_path(to_path)
        data = await self._rpc(
            access_token,
            "files/move_v2",
            {"from_path": safe_from, "to_path": safe_to},
            "Failed to move file",
        )
        logger.info(f"Moved {safe_from} -> {safe_to}")
        return RemoteEntry.from_dict(data["metadata"])

    async def delete(self, access_token: str, path: str) -> RemoteEntry:
        """Delete a file or folder."""
        safe_path = self.guard_write_path(path)
        data = await self._rpc(
            access_token,
            "files/delete_v2",
            {"path": safe_path},
            "Failed to delete file",
        )
        logger.info(f"Deleted {safe_path}")
        return RemoteEntry.from_dict(data["metadata"])

    # =========================================================================
    # Transport
    # =========================================================================

    async def _rpc(
        self,
        access_token: str,
        endpoint: str,
        body: Optional[Dict[str, Any]],
        operation: str,
    ) -> Dict[str, Any]:
        """POST a JSON body to the API host and return the JSON response."""
        client = await self._get_http_client()
        url = f"{self.config.api_url.rstrip('/')}/{endpoint}"
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            if body is None:
                response = await client.post(url, headers=headers)
            else:
                response = await client.post(url, headers=headers, json=body)
        except httpx.RequestError as e:
            logger.error(f"{operation}: {e}")
            raise RemoteError(operation, str(e)) from e

        self._raise_for_response(response, operation)
        return self._json(response, operation)

    async def _send_content(
        self,
        access_token: str,
        endpoint: str,
        arg: Dict[str, Any],
        data: Optional[bytes],
    ) -> httpx.Response:
        """POST to the content host with the argument in a header."""
        client = await self._get_http_client()
        url = f"{self.config.content_url.rstrip('/')}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {access_token}",
            API_ARG_HEADER: encode_api_arg(arg),
        }
        if data is not None:
            headers["Content-Type"] = "application/octet-stream"
            return await client.post(url, headers=headers, content=data)
        return await client.post(url, headers=headers)

    async def _content(
        self,
        access_token: str,
        endpoint: str,
        arg: Dict[str, Any],
        data: Optional[bytes],
        operation: str,
    ) -> httpx.Response:
        try:
            response = await self._send_content(access_token, endpoint, arg, data)
        except httpx.RequestError as e:
            logger.error(f"{operation}: {e}")
            raise RemoteError(operation, str(e)) from e

        self._raise_for_response(response, operation)
        return response

    @staticmethod
    def _raise_for_response(response: httpx.Response, operation: str) -> None:
        if not response.is_success:
            logger.error(f"{operation}: {response.status_code} {response.text}")
            raise RemoteError(operation, response.text, response.status_code)

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Dict[str, Any]:
        """Decode a 2xx JSON body, raising RemoteError when it is not an object."""
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"{operation}: invalid JSON response: {e}")
            raise RemoteError(operation, f"Invalid JSON response: {response.text}", response.status_code) from e

        if not isinstance(data, dict):
            raise RemoteError(operation, f"Unexpected response: {response.text}", response.status_code)
        return data
