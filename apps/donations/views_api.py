"""
Donations API Views - REST API endpoints for donation records.

ViewSets:
- DonationViewSet: listing, manual recording, edit-window checks and audited edits

Endpoints follow the namespace: api:v1:donations:resource-name
"""
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.constants import DonationStatus, RecordSource
from apps.core.edit_window import EditWindowPolicy
from apps.core.permissions import IsFinanceStaff, IsMember, IsTreasurer, is_finance_staff
from apps.core.serializers import EditWindowSerializer

from .models import Donation
from .serializers import (
    DonationEditSerializer,
    DonationListSerializer,
    DonationSerializer,
    ManualDonationCreateSerializer,
)
from .services_edit import DonationEditService, DonationNotEditable


class DonationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for Donation records.

    Provides:
    - list: GET /api/v1/donations/donations/
    - retrieve: GET /api/v1/donations/donations/{uuid}/
    - create: POST /api/v1/donations/donations/ (manual entry)
    - destroy: DELETE /api/v1/donations/donations/{uuid}/ (soft delete)

    Custom actions:
    - editability: GET /api/v1/donations/donations/{uuid}/editability/
    - edit: POST /api/v1/donations/donations/{uuid}/edit/

    There is no PUT/PATCH: corrections go through ``edit`` so they are
    window-checked and recorded in the edit history.
    """

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['donation_type', 'payment_method', 'source', 'status', 'date']
    search_fields = ['donation_number', 'member__first_name', 'member__last_name']
    ordering_fields = ['date', 'amount', 'created_at']
    ordering = ['-date', '-created_at']

    def get_queryset(self):
        """Finance staff see every donation, members only their own."""
        user = self.request.user

        if is_finance_staff(user):
            return Donation.objects.all().select_related('member', 'recorded_by')

        if hasattr(user, 'member_profile'):
            return Donation.objects.filter(member=user.member_profile).select_related('member')

        return Donation.objects.none()

    def get_serializer_class(self):
        if self.action == 'list':
            return DonationListSerializer
        if self.action == 'create':
            return ManualDonationCreateSerializer
        if self.action == 'edit':
            return DonationEditSerializer
        if self.action == 'editability':
            return EditWindowSerializer
        return DonationSerializer

    def get_permissions(self):
        if self.action == 'create':
            return [IsTreasurer()]
        if self.action in ['destroy', 'edit']:
            return [IsFinanceStaff()]
        return [IsMember()]

    def create(self, request, *args, **kwargs):
        """Record a manual donation and return the full representation."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donation = serializer.save(
            source=RecordSource.MANUAL,
            status=DonationStatus.SUCCEEDED,
            processed_at=timezone.now(),
            recorded_by=getattr(request.user, 'member_profile', None),
        )
        return Response(DonationSerializer(donation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def editability(self, request, pk=None):
        """
        Whether the donation can still be edited, and for how long.

        GET /api/v1/donations/donations/{uuid}/editability/
        """
        donation = self.get_object()
        decision = EditWindowPolicy.for_donations().evaluate(donation)
        return Response(EditWindowSerializer(decision).data)

    @action(detail=True, methods=['post'])
    def edit(self, request, pk=None):
        """
        Correct a manual donation inside its edit window.

        POST /api/v1/donations/donations/{uuid}/edit/
        """
        donation = self.get_object()
        serializer = DonationEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        changes = dict(serializer.validated_data)
        reason = changes.pop('edit_reason')

        try:
            donation = DonationEditService.edit_manual_donation(
                donation, changes, edited_by=request.user, reason=reason,
            )
        except DonationNotEditable as e:
            return Response({'error': e.message}, status=status.HTTP_400_BAD_REQUEST)

        return Response(DonationSerializer(donation).data)
