import os
import secrets
import time
from functools import lru_cache
from typing import Optional

from app import config


class LocalAssetStore:
    """
    Write-once blob storage on local disk.

    Assets are addressed by refs relative to ``root`` (e.g.
    ``studentImages/<school_id>/1700000000000-ab12cd34ef56ab78.png``) and are
    served by the app under ``/uploads/<ref>``.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def path_for(self, ref: str) -> str:
        path = os.path.abspath(os.path.join(self.root, ref))
        if os.path.commonpath([self.root, path]) != self.root:
            raise ValueError(f"Asset ref escapes storage root: {ref}")
        return path

    def new_ref(self, folder: str, scope_id: Optional[str] = None, extension: str = ".png") -> str:
        if not extension.startswith("."):
            extension = f".{extension}"
        unique_name = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension}"
        parts = [folder, str(scope_id), unique_name] if scope_id else [folder, unique_name]
        return "/".join(parts)

    def exists(self, ref: Optional[str]) -> bool:
        if not ref:
            return False
        try:
            return os.path.isfile(self.path_for(ref))
        except ValueError:
            return False

    def write(self, ref: str, data: bytes) -> str:
        path = self.path_for(ref)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        # "xb" keeps names write-once
        with open(path, "xb") as f:
            f.write(data)
        return ref

    def delete(self, ref: Optional[str]) -> bool:
        if not self.exists(ref):
            return False
        os.remove(self.path_for(ref))
        return True


@lru_cache(maxsize=1)
def get_asset_store() -> LocalAssetStore:
    return LocalAssetStore(config.UPLOAD_ROOT)
