"""
Donations app configuration.
"""
from django.apps import AppConfig


class DonationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.donations'
    verbose_name = 'Donations'
