"""
Remote file API data models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import ConflictError, RemoteError


class EntryTag(str, Enum):
    """Kind of remote entry."""
    FILE = "file"
    FOLDER = "folder"
    DELETED = "deleted"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class RemoteEntry:
    """Snapshot of one entry from a folder listing."""
    tag: EntryTag
    name: str
    path_lower: str
    path_display: str
    id: str
    server_modified: Optional[datetime] = None
    rev: Optional[str] = None
    size: Optional[int] = None

    @property
    def is_file(self) -> bool:
        return self.tag == EntryTag.FILE

    @property
    def is_folder(self) -> bool:
        return self.tag == EntryTag.FOLDER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemoteEntry":
        return cls(
            tag=EntryTag(data[".tag"]),
            name=data["name"],
            path_lower=data.get("path_lower", ""),
            path_display=data.get("path_display", ""),
            id=data.get("id", ""),
            server_modified=_parse_timestamp(data.get("server_modified")),
            rev=data.get("rev"),
            size=data.get("size"),
        )


@dataclass
class ListFolderPage:
    """One page of a cursor-paginated listing."""
    entries: List[RemoteEntry]
    cursor: str
    has_more: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListFolderPage":
        return cls(
            entries=[RemoteEntry.from_dict(e) for e in data.get("entries", [])],
            cursor=data.get("cursor", ""),
            has_more=bool(data.get("has_more", False)),
        )


@dataclass
class RevisionedFile:
    """Downloaded file content with the revision it was read at."""
    content: bytes
    rev: str
    name: str
    path_display: str

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


@dataclass
class UploadResult:
    """Metadata returned for an uploaded file."""
    name: str
    path_lower: str
    path_display: str
    id: str
    rev: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadResult":
        return cls(
            name=data.get("name", ""),
            path_lower=data.get("path_lower", ""),
            path_display=data.get("path_display", ""),
            id=data.get("id", ""),
            rev=data.get("rev", ""),
        )


class UpdateStatus(str, Enum):
    """Outcome of a revision-checked update."""
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass
class UpdateResult:
    """
    Result of an optimistic-concurrency update.

    A CONFLICT means the file changed remotely since expected_rev was read.
    Callers should download again and let the user reconcile; the update
    is never retried or merged automatically.
    """
    status: UpdateStatus
    path: str
    expected_rev: str
    rev: Optional[str] = None
    name: Optional[str] = None
    path_display: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == UpdateStatus.SUCCESS

    def raise_for_status(self) -> "UpdateResult":
        """Raise ConflictError or RemoteError unless the update succeeded."""
        if self.status == UpdateStatus.CONFLICT:
            raise ConflictError(self.path, self.error or "")
        if self.status == UpdateStatus.FAILED:
            raise RemoteError("Failed to update file", self.error or "", self.status_code)
        return self


@dataclass
class Account:
    """The account that owns the session."""
    account_id: str
    email: str
    display_name: str
    given_name: str = ""
    surname: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        name = data.get("name", {})
        return cls(
            account_id=data.get("account_id", ""),
            email=data.get("email", ""),
            display_name=name.get("display_name", ""),
            given_name=name.get("given_name", ""),
            surname=name.get("surname", ""),
            raw=data,
        )
