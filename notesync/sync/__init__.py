"""
Remote file access for NoteSync.

Cursor-paginated listing, revision-checked updates and path containment
for the vault folder in the remote store.
"""

from .models import (
    EntryTag,
    RemoteEntry,
    ListFolderPage,
    RevisionedFile,
    UploadResult,
    UpdateStatus,
    UpdateResult,
    Account,
)
from .paths import (
    sanitize,
    is_contained,
    sanitize_filename,
    generate_filename,
    get_parent_path,
    remove_extension,
    join_path,
)
from .client import RemoteFileClient, encode_api_arg

__all__ = [
    # Models
    "EntryTag",
    "RemoteEntry",
    "ListFolderPage",
    "RevisionedFile",
    "UploadResult",
    "UpdateStatus",
    "UpdateResult",
    "Account",
    # Paths
    "sanitize",
    "is_contained",
    "sanitize_filename",
    "generate_filename",
    "get_parent_path",
    "remove_extension",
    "join_path",
    # Client
    "RemoteFileClient",
    "encode_api_arg",
]
