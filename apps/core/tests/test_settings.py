"""Tests for the per-environment finance settings."""
import importlib

from django.conf import settings


def test_development_uses_short_edit_windows():
    development = importlib.import_module('config.settings.development')

    assert development.DONATION_EDIT_WINDOW_MINUTES == 15
    assert development.EXPENSE_EDIT_WINDOW_MINUTES == 15
    assert development.CHURCH_STORAGE_PREFIX == 'dev'
    assert development.RECEIPT_SIGNED_URL_TTL_SECONDS == 300


def test_active_settings_keep_full_day_windows():
    assert settings.DONATION_EDIT_WINDOW_MINUTES == 24 * 60
    assert settings.EXPENSE_EDIT_WINDOW_MINUTES == 24 * 60
