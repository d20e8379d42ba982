"""Reusable file validators for uploads."""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from .constants import RECEIPT_CONTENT_TYPES


def validate_receipt_file(value):
    """Validate expense receipts (images or PDF, max RECEIPT_MAX_UPLOAD_MB)."""
    max_mb = getattr(settings, 'RECEIPT_MAX_UPLOAD_MB', 10)
    max_size = max_mb * 1024 * 1024

    if value.size > max_size:
        raise ValidationError(
            _('File too large. Maximum size is %(max)d MB. '
              'Current size: %(size).1f MB.'),
            params={'max': max_mb, 'size': value.size / (1024 * 1024)},
            code='file_too_large',
        )

    content_type = getattr(value, 'content_type', None) or 'application/octet-stream'
    if content_type not in RECEIPT_CONTENT_TYPES:
        raise ValidationError(
            _('Invalid file type: %(type)s. '
              'Only images (JPEG, PNG, GIF, WebP) and PDFs are allowed.'),
            params={'type': content_type},
            code='invalid_content_type',
        )
