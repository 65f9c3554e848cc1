"""
Stockage des pièces jointes sur le disque local
"""

import logging
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from taskhub.core.errors import ValidationFailed
from taskhub.models.task import TaskAttachment

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".pdf", ".doc", ".docx", ".txt"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/pjpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}
CHUNK_SIZE = 1024 * 1024  # lecture par blocs de 1 Mo
URL_PREFIX = "uploads"
MAX_NAME_ATTEMPTS = 5


class AttachmentStore:
    def __init__(self, upload_dir: str, max_size: int):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size

    def ensure_dir(self):
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate(self, original_name: str, content_type: str):
        # extension et type MIME sont vérifiés indépendamment
        ext = Path(original_name or "").suffix.lower()
        mime = (content_type or "").split(";")[0].strip().lower()
        if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
            logger.warning(f"Rejected upload {original_name!r} ({content_type})")
            raise ValidationFailed("Only images, PDFs, and documents are allowed")

    def store(self, task_id: int, stream: BinaryIO, original_name: str, content_type: str) -> TaskAttachment:
        """Écrit le fichier et renvoie la pièce jointe (pas encore rattachée à la tâche).

        Le fichier est écrit par blocs; au-delà de max_size il est supprimé
        et l'upload est refusé.
        """
        self.validate(original_name, content_type)
        self.ensure_dir()

        ext = Path(original_name).suffix.lower()
        filepath, handle = self._create_unique(ext)

        total_size = 0
        try:
            with handle:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self.max_size:
                        raise ValidationFailed(
                            f"File too large. Maximum size: {self.max_size / (1024 * 1024):.0f}MB"
                        )
                    handle.write(chunk)
        except Exception:
            filepath.unlink(missing_ok=True)
            raise

        logger.info(f"Stored attachment {filepath.name} for task {task_id} ({total_size} bytes)")
        return TaskAttachment(
            filename=filepath.name,
            original_name=original_name,
            path=f"{URL_PREFIX}/{filepath.name}",
        )

    def delete(self, attachment: TaskAttachment):
        # idempotent: un fichier absent n'est pas une erreur
        filepath = self.upload_dir / Path(attachment.filename).name
        try:
            filepath.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Could not delete {filepath}: {e}")

    def _create_unique(self, ext: str):
        # "x" = création exclusive, deux uploads simultanés ne s'écrasent jamais
        for _ in range(MAX_NAME_ATTEMPTS):
            name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
            filepath = self.upload_dir / name
            try:
                return filepath, open(filepath, "xb")
            except FileExistsError:
                continue
        raise RuntimeError("Could not allocate a unique filename")
