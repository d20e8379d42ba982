"""
Members models - donor and staff profiles.

Models:
- Member: Church member profile with auto-generated member number, linked to
  a Django user when the person signs in (treasurers, expense submitters).
"""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import SoftDeleteModel
from apps.core.constants import Roles


class Member(SoftDeleteModel):
    """
    Church member profile.

    Each member has a unique auto-generated member number (MBR-YYYY-XXXX).
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='member_profile',
        verbose_name=_('User account')
    )

    member_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        verbose_name=_('Member number')
    )

    first_name = models.CharField(
        max_length=100,
        verbose_name=_('First name')
    )

    last_name = models.CharField(
        max_length=100,
        verbose_name=_('Last name')
    )

    email = models.EmailField(
        blank=True,
        verbose_name=_('Email')
    )

    phone = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Phone')
    )

    role = models.CharField(
        max_length=20,
        choices=Roles.CHOICES,
        default=Roles.MEMBER,
        verbose_name=_('Role')
    )

    class Meta:
        verbose_name = _('Member')
        verbose_name_plural = _('Members')
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f'{self.full_name} ({self.member_number})'

    def save(self, *args, **kwargs):
        """Auto-generate member number on first save."""
        if not self.member_number:
            from apps.core.utils import generate_member_number
            self.member_number = generate_member_number()
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    @property
    def is_finance_staff(self):
        return self.role in Roles.FINANCE_ROLES
