"""Tests for the Member model."""
import pytest
from django.utils import timezone

from apps.core.constants import Roles
from apps.members.models import Member

from .factories import MemberFactory, MemberWithUserFactory, TreasurerFactory


@pytest.mark.django_db
class TestMember:

    def test_member_number_generated(self):
        member = MemberFactory()

        assert member.member_number == f'MBR-{timezone.now().year}-0001'

    def test_member_numbers_are_sequential(self):
        MemberFactory()
        second = MemberFactory()

        assert second.member_number.endswith('-0002')

    def test_str(self):
        member = MemberFactory(first_name='Marie', last_name='Tremblay')

        assert str(member) == f'Marie Tremblay ({member.member_number})'

    def test_finance_staff_role(self):
        assert TreasurerFactory().is_finance_staff is True
        assert MemberFactory(role=Roles.VOLUNTEER).is_finance_staff is False

    def test_user_link(self):
        member = MemberWithUserFactory()

        assert member.user.member_profile == member

    def test_soft_deleted_members_hidden(self):
        member = MemberFactory()
        member.delete()

        assert not Member.objects.filter(pk=member.pk).exists()
        assert Member.all_objects.filter(pk=member.pk).exists()
