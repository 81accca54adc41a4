"""Storage collaborators: login records and uploads."""

from chatrelay.storage.logins import LoginStore
from chatrelay.storage.uploads import UploadStore

__all__ = ["LoginStore", "UploadStore"]
