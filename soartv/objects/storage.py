from __future__ import annotations

import logging
import uuid
from pathlib import Path

from itsdangerous import BadSignature, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "uploads"


class ObjectNotFoundError(Exception):
    pass


class ObjectStorage:
    """
    Local blob store for uploaded media.

    Uploads are two-step: ``new_upload`` issues an object id plus a signed,
    time-limited token; the client then PUTs the bytes with that token.
    Stored objects are served from ``/objects/<path>``.
    """

    def __init__(self, root: Path, secret: str, upload_ttl: int) -> None:
        self.root = Path(root)
        self.upload_ttl = upload_ttl
        self._serializer = URLSafeTimedSerializer(secret, salt="soartv-object-upload")

    def new_upload(self) -> tuple[str, str]:
        object_id = uuid.uuid4().hex
        return object_id, self._serializer.dumps(object_id)

    def verify_upload_token(self, object_id: str, token: str) -> bool:
        try:
            signed_id = self._serializer.loads(token, max_age=self.upload_ttl)
        except BadSignature:
            return False
        return signed_id == object_id

    def save(self, object_id: str, data: bytes) -> str:
        target = self.root / UPLOAD_PREFIX / object_id
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored object %s (%d bytes)", object_id, len(data))
        return f"/objects/{UPLOAD_PREFIX}/{object_id}"

    def resolve(self, object_path: str) -> Path:
        root = self.root.resolve()
        candidate = (root / object_path).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            raise ObjectNotFoundError(object_path)
        return candidate
