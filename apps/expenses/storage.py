"""
Receipt storage on a private Supabase bucket.

Receipts are never public: the API hands out signed URLs that expire.

Usage:
    storage = get_receipt_storage()
    path = storage.upload(uploaded_file, church_prefix, user_id)
    link = storage.create_signed_url(path, ttl_seconds=900)
"""
import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone
from supabase import Client, create_client

from apps.core.utils import sanitize_filename

from apps.core.signed_links import SignedLink

logger = logging.getLogger(__name__)


class ReceiptStorageError(Exception):
    """The storage provider rejected or failed an operation."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ReceiptStorage:
    """Upload, sign and remove receipt files in one bucket."""

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def build_path(self, church_prefix: str, user_id, filename: str) -> str:
        """{church}/receipts/{user}/{epoch_ms}_{sanitized name}"""
        stamp = int(timezone.now().timestamp() * 1000)
        return f'{church_prefix}/receipts/{user_id}/{stamp}_{sanitize_filename(filename)}'

    def upload(self, file, church_prefix: str, user_id, preferred_name: Optional[str] = None) -> str:
        """Store ``file`` (a Django UploadedFile) and return its storage path."""
        base_name = preferred_name or getattr(file, 'name', None) or 'receipt'
        path = self.build_path(church_prefix, user_id, base_name)
        content_type = getattr(file, 'content_type', None) or 'application/octet-stream'

        file.seek(0)
        try:
            self._bucket().upload(
                path=path,
                file=file.read(),
                file_options={'content-type': content_type, 'upsert': 'false'},
            )
        except Exception as e:
            logger.error(f'Receipt upload failed for {path}: {e}')
            raise ReceiptStorageError(f'Failed to upload receipt to storage: {e}', path=path) from e

        logger.info(f'Uploaded receipt to {path}')
        return path

    def create_signed_url(self, path: str, ttl_seconds: int) -> SignedLink:
        """Sign ``path`` for ``ttl_seconds``; the expiry is computed on our clock."""
        issued_at = timezone.now()
        try:
            data = self._bucket().create_signed_url(path, ttl_seconds)
        except Exception as e:
            logger.error(f'Signing receipt {path} failed: {e}')
            raise ReceiptStorageError(f'Failed to generate signed URL for receipt: {e}', path=path) from e

        url = (data or {}).get('signedURL') or (data or {}).get('signedUrl')
        if not url:
            raise ReceiptStorageError('No signed URL returned from storage.', path=path)

        return SignedLink(url=url, expires_at=issued_at + timedelta(seconds=ttl_seconds))

    def remove(self, path: str):
        try:
            self._bucket().remove([path])
        except Exception as e:
            raise ReceiptStorageError(f'Failed to delete receipt: {e}', path=path) from e
        logger.info(f'Removed receipt {path}')


_storage: Optional[ReceiptStorage] = None


def get_receipt_storage() -> ReceiptStorage:
    """Shared ReceiptStorage built from SUPABASE_URL / SUPABASE_SERVICE_KEY."""
    global _storage
    if _storage is None:
        url = getattr(settings, 'SUPABASE_URL', '')
        key = getattr(settings, 'SUPABASE_SERVICE_KEY', '')
        if not url or not key:
            raise ReceiptStorageError('Receipt storage is not configured.')
        try:
            client = create_client(url, key)
        except Exception as e:
            raise ReceiptStorageError(f'Failed to create storage client: {e}') from e
        _storage = ReceiptStorage(client, getattr(settings, 'RECEIPTS_BUCKET', 'receipts'))
        logger.info('Receipt storage client initialized')
    return _storage
