"""
Expenses API Views - REST API endpoints for expenses and receipt links.

ViewSets:
- ExpenseViewSet: submission, submitter edits, review, edit-window checks
- RefreshReceiptUrlView: POST /api/expenses/refresh-receipt-url

Endpoints follow the namespace: api:v1:expenses:resource-name
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.edit_window import EditWindowPolicy
from apps.core.permissions import IsFinanceStaff, IsMember, IsSubmitterOrFinanceStaff, is_finance_staff
from apps.core.serializers import EditWindowSerializer

from .models import Expense
from .serializers import (
    ExpenseListSerializer,
    ExpenseSerializer,
    ExpenseUpdateSerializer,
    ExpenseWriteSerializer,
)
from .services import ExpenseNotEditable, ExpenseService, ReceiptMissing
from .storage import ReceiptStorageError

logger = logging.getLogger(__name__)


def _storage_error_response(message, error):
    return Response(
        {'error': message, 'details': error.message},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def refresh_receipt_url_response(request):
    """
    Shared body of both refresh-receipt-url routes.

    Request: {expenseId}
    Response: 200 {receiptUrl, expiresAt} | 4xx/500 {error}
    """
    expense_id = request.data.get('expenseId') if hasattr(request.data, 'get') else None
    if not expense_id:
        return Response({'error': 'Missing expense ID'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        expense = Expense.objects.select_related('submitter').filter(pk=expense_id).first()
    except (ValueError, DjangoValidationError):
        expense = None
    if expense is None:
        return Response({'error': 'Expense not found'}, status=status.HTTP_404_NOT_FOUND)

    if not IsSubmitterOrFinanceStaff().has_object_permission(request, None, expense):
        return Response({'error': 'Forbidden'}, status=status.HTTP_403_FORBIDDEN)

    try:
        link = ExpenseService.refresh_receipt_url(expense)
    except ReceiptMissing as e:
        return Response({'error': e.message}, status=status.HTTP_404_NOT_FOUND)
    except ReceiptStorageError as e:
        return _storage_error_response('Failed to generate signed URL for receipt', e)

    return Response({
        'receiptUrl': link.url,
        'expiresAt': link.expires_at.isoformat(),
    })


class RefreshReceiptUrlView(APIView):
    """POST /api/expenses/refresh-receipt-url"""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        return refresh_receipt_url_response(request)


class ExpenseViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for Expense records.

    Provides:
    - list: GET /api/v1/expenses/expenses/
    - retrieve: GET /api/v1/expenses/expenses/{uuid}/
    - create: POST /api/v1/expenses/expenses/ (multipart, optional receipt)
    - partial_update: PATCH /api/v1/expenses/expenses/{uuid}/ (submitter only)
    - destroy: DELETE /api/v1/expenses/expenses/{uuid}/ (soft delete)

    Custom actions:
    - editability: GET /api/v1/expenses/expenses/{uuid}/editability/
    - approve / reject: POST /api/v1/expenses/expenses/{uuid}/approve/
    - refresh_receipt_url: POST /api/v1/expenses/expenses/refresh-receipt-url/
    """

    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'status', 'expense_date']
    search_fields = ['expense_number', 'vendor', 'description']
    ordering_fields = ['expense_date', 'amount', 'created_at']
    ordering = ['-expense_date', '-created_at']

    def get_queryset(self):
        """Finance staff see every expense, members the ones they submitted."""
        user = self.request.user

        if is_finance_staff(user):
            return Expense.objects.all().select_related('submitter', 'approver')

        if hasattr(user, 'member_profile'):
            return Expense.objects.filter(submitter=user.member_profile).select_related('submitter')

        return Expense.objects.none()

    def get_serializer_class(self):
        if self.action == 'list':
            return ExpenseListSerializer
        if self.action == 'create':
            return ExpenseWriteSerializer
        if self.action == 'partial_update':
            return ExpenseUpdateSerializer
        if self.action == 'editability':
            return EditWindowSerializer
        return ExpenseSerializer

    def get_permissions(self):
        if self.action in ['destroy', 'approve', 'reject']:
            return [IsFinanceStaff()]
        return [IsMember()]

    def create(self, request, *args, **kwargs):
        member = getattr(request.user, 'member_profile', None)
        if member is None:
            return Response(
                {'error': 'A member profile is required to submit expenses.'},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        receipt = data.pop('receipt', None)

        try:
            expense = ExpenseService.create_expense(member, data, receipt_file=receipt)
        except ReceiptStorageError as e:
            return _storage_error_response('Failed to upload receipt', e)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        expense = self.get_object()
        serializer = ExpenseUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        receipt = data.pop('receipt', None)
        remove_receipt = data.pop('remove_receipt', False)

        try:
            expense = ExpenseService.update_expense(
                expense,
                getattr(request.user, 'member_profile', None),
                data,
                receipt_file=receipt,
                remove_receipt=remove_receipt,
            )
        except ExpenseNotEditable as e:
            return Response({'error': e.message}, status=status.HTTP_403_FORBIDDEN)
        except ReceiptStorageError as e:
            return _storage_error_response('Failed to upload receipt', e)

        return Response(ExpenseSerializer(expense).data)

    @action(detail=True, methods=['get'])
    def editability(self, request, pk=None):
        """GET /api/v1/expenses/expenses/{uuid}/editability/"""
        expense = self.get_object()
        decision = EditWindowPolicy.for_expenses().evaluate(expense)
        return Response(EditWindowSerializer(decision).data)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        return self._review(approved=True)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        return self._review(approved=False)

    def _review(self, approved):
        expense = self.get_object()
        try:
            expense = ExpenseService.review_expense(
                expense, getattr(self.request.user, 'member_profile', None), approved,
            )
        except ExpenseNotEditable as e:
            return Response({'error': e.message}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ExpenseSerializer(expense).data)

    @action(detail=False, methods=['post'], url_path='refresh-receipt-url')
    def refresh_receipt_url(self, request):
        """POST /api/v1/expenses/expenses/refresh-receipt-url/"""
        return refresh_receipt_url_response(request)
