"""
Record drawer state machine.

A drawer shows one financial record:

    CLOSED -> LOADING -> {ERROR | LOADED} -> CLOSED

While LOADED it also tracks whether the record is LOCKED, EDITABLE or being
EDITED, as decided by an EditWindowPolicy. The drawer owns no business rules;
it only projects the loader's and the policy's results into view state.
"""
import logging
from typing import Callable, Optional

from django.core.exceptions import ObjectDoesNotExist, ValidationError

from .api_client import ApiClientError
from .edit_window import EditWindowDecision, EditWindowPolicy, LOCKED

logger = logging.getLogger(__name__)


class DrawerState:
    CLOSED = 'closed'
    LOADING = 'loading'
    ERROR = 'error'
    LOADED = 'loaded'


class EditState:
    LOCKED = 'locked'
    EDITABLE = 'editable'
    EDITING = 'editing'


class DrawerStateError(Exception):
    """A transition was requested from a state that does not allow it."""


class RecordDrawer:
    """Presentation adapter for a single donation or expense."""

    not_found_message = 'Record not found.'

    def __init__(self, load_record: Callable, policy: EditWindowPolicy):
        self.load_record = load_record
        self.policy = policy
        self._reset()

    def _reset(self):
        self.state = DrawerState.CLOSED
        self.record = None
        self.record_id = None
        self.error = None
        self.decision: EditWindowDecision = LOCKED
        self.editing = False

    @property
    def edit_state(self) -> Optional[str]:
        if self.state != DrawerState.LOADED:
            return None
        if self.editing:
            return EditState.EDITING
        return EditState.EDITABLE if self.decision.editable else EditState.LOCKED

    def open(self, record_id):
        if self.state != DrawerState.CLOSED:
            self.close()

        self.state = DrawerState.LOADING
        self.record_id = record_id
        try:
            record = self.load_record(record_id)
        except (ObjectDoesNotExist, ValidationError, ValueError):
            # Malformed ids are reported like missing records.
            self._fail(self.not_found_message)
            return self
        except ApiClientError as e:
            self._fail(e.message)
            return self

        if self.state != DrawerState.LOADING or self.record_id != record_id:
            # Closed or reopened on another record while loading.
            return self

        self.record = record
        self.state = DrawerState.LOADED
        self.refresh()
        self.on_loaded()
        return self

    def _fail(self, message: str):
        logger.info(f'Drawer could not load {self.record_id}: {message}')
        self.state = DrawerState.ERROR
        self.error = message

    def on_loaded(self):
        """Hook for subclasses that fetch more state once the record is in."""

    def on_close(self):
        """Hook for subclasses that hold per-record resources."""

    def refresh(self) -> EditWindowDecision:
        """Re-evaluate the edit window; called on every render."""
        if self.state != DrawerState.LOADED:
            return LOCKED
        self.decision = self.policy.evaluate(self.record)
        return self.decision

    def start_editing(self):
        if self.state != DrawerState.LOADED:
            raise DrawerStateError('Nothing is loaded.')
        if not self.refresh().editable:
            raise DrawerStateError('This record can no longer be edited.')
        self.editing = True

    def cancel_editing(self):
        if not self.editing:
            raise DrawerStateError('Not editing.')
        self.editing = False
        self.refresh()

    def finish_editing(self, updated_record):
        if not self.editing:
            raise DrawerStateError('Not editing.')
        self.record = updated_record
        self.editing = False
        self.refresh()

    def close(self):
        if self.state == DrawerState.CLOSED:
            return
        self.on_close()
        self._reset()

    def view_state(self) -> dict:
        if self.state == DrawerState.LOADED:
            self.refresh()
        return {
            'state': self.state,
            'record_id': str(self.record_id) if self.record_id is not None else None,
            'error': self.error,
            'edit_state': self.edit_state,
            'editable': self.decision.editable,
            'remaining': self.decision.remaining_display,
        }
