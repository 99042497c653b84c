"""Step-by-step orchestration on top of a :class:`WizardSession`.

Each view translates operator gestures into actions and reports whether its
"continue" affordance is enabled; refused navigation is never an error.
"""

from pathlib import PurePath
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .actions import (
    AddSigner,
    ClearFile,
    RemoveField,
    RemoveSigner,
    ReorderSigners,
    SetDocumentInfo,
    SetFile,
    SetMessage,
    UpdateField,
    UpdateSigner,
)
from .constants import ALLOWED_CONTENT_TYPES, DEFAULT_MAX_UPLOAD_BYTES
from .errors import UploadRejected
from .fields import FieldPatch, field_index, fields_on_page, page_count
from .geometry import Point, Rect
from .placement import MoveDrop, PlaceDrop, handle_drop, parse_drop
from .session import Dispatcher, Suggester, WizardSession
from .signers import SignerPatch, has_signer, index_by_reference, signer_index
from .state import PlacedField, SignerCandidate, UploadedFile, WizardStep, step_index
from .summary import ReviewSummary, summarize, template_suggester

_CANDIDATE_FIELDS = set(SignerCandidate.model_fields)


def validate_upload(filename: str, content_type: str, size: int, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """Raise :class:`UploadRejected` unless the file can be sent for signature."""
    if not filename:
        raise UploadRejected("file name is required")
    suffix = PurePath(filename).suffix.lower()
    if content_type not in ALLOWED_CONTENT_TYPES and suffix not in ALLOWED_CONTENT_TYPES.values():
        raise UploadRejected(f"unsupported file type: {content_type or suffix or 'unknown'}")
    if size <= 0:
        raise UploadRejected("file is empty")
    if size > max_bytes:
        raise UploadRejected(f"file exceeds {max_bytes} bytes", too_large=True)


class UploadStep:
    def __init__(self, session: WizardSession, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES):
        self.session = session
        self.max_bytes = max_bytes

    def accept(self, file: UploadedFile, preview: str) -> None:
        validate_upload(file.filename, file.content_type, file.size, self.max_bytes)
        self.session.dispatch(SetFile(file=file, preview=preview))

    def remove_file(self) -> None:
        self.session.dispatch(ClearFile())

    def rename(self, name: str, description: Optional[str] = None) -> bool:
        document = self.session.dispatch(SetDocumentInfo(name=name, description=description)).document
        return document is not None and document.name == name

    @property
    def can_continue(self) -> bool:
        return self.session.can_proceed_from_upload

    def next(self) -> bool:
        return self.session.set_step(WizardStep.SIGNERS)


class SignersStep:
    """Known participants are toggled on and off; anyone else is added by hand."""

    def __init__(self, session: WizardSession, directory: Sequence[SignerCandidate] = ()):
        self.session = session
        self.directory = tuple(directory)

    def _index_of(self, participant: SignerCandidate) -> Optional[int]:
        if participant.reference is not None:
            index = index_by_reference(self.session.state, participant.reference)
            if index is not None:
                return index
        return signer_index(self.session.state, participant.email)

    def is_selected(self, participant: SignerCandidate) -> bool:
        return self._index_of(participant) is not None

    def known(self) -> Tuple[Tuple[SignerCandidate, bool], ...]:
        """Directory entries paired with whether each is already a signer."""
        return tuple((p, self.is_selected(p)) for p in self.directory)

    def toggle_known(self, participant: SignerCandidate, selected: bool) -> bool:
        index = self._index_of(participant)
        if selected:
            if index is not None:
                return False
            before = len(self.session.state.signers)
            return len(self.session.dispatch(AddSigner(candidate=participant)).signers) > before
        if index is None:
            return False
        self.session.dispatch(RemoveSigner(index=index))
        return True

    def save(self, form: SignerCandidate, editing_index: Optional[int] = None) -> bool:
        """Add a new signer, or update the one at ``editing_index``."""
        if not form.name.strip() or not form.email.strip():
            return False
        state = self.session.state
        if editing_index is None:
            if has_signer(state, form.email):
                return False
            return len(self.session.dispatch(AddSigner(candidate=form)).signers) > len(state.signers)
        if not 0 <= editing_index < len(state.signers):
            return False
        patch = SignerPatch(**form.model_dump())
        stored = self.session.dispatch(UpdateSigner(index=editing_index, patch=patch)).signers[editing_index]
        # an edit is accepted when the stored signer now matches the form
        return stored.model_dump(include=_CANDIDATE_FIELDS) == form.model_dump()

    def remove(self, index: int) -> None:
        self.session.dispatch(RemoveSigner(index=index))

    def move(self, from_index: int, to_index: int) -> None:
        self.session.dispatch(ReorderSigners(from_index=from_index, to_index=to_index))

    @property
    def can_continue(self) -> bool:
        return self.session.can_proceed_from_signers

    def back(self) -> bool:
        return self.session.set_step(WizardStep.UPLOAD)

    def next(self) -> bool:
        return self.session.set_step(WizardStep.FIELDS)


class FieldsStep:
    """Field placement.

    ``active_signer``, ``current_page`` and the selected field are screen
    state only; they never enter the :class:`WizardState`.
    """

    def __init__(self, session: WizardSession):
        self.session = session
        self._active_signer: Optional[str] = None
        self._page = 1
        self._selected_key: Optional[str] = None
        self._revision = session.state.document_revision

    def _sync(self) -> None:
        revision = self.session.state.document_revision
        if revision != self._revision:
            self._revision = revision
            self._selected_key = None
            self._page = 1

    @property
    def active_signer(self) -> Optional[str]:
        state = self.session.state
        if self._active_signer is not None and has_signer(state, self._active_signer):
            return self._active_signer
        return state.signers[0].email if state.signers else None

    def choose_signer(self, email: str) -> bool:
        if not has_signer(self.session.state, email):
            return False
        self._active_signer = email
        return True

    @property
    def page_count(self) -> int:
        return page_count(self.session.state)

    @property
    def current_page(self) -> int:
        self._sync()
        return min(self._page, self.page_count)

    def go_to_page(self, page: int) -> int:
        self._sync()
        self._page = max(1, min(page, self.page_count))
        return self._page

    def visible_fields(self) -> Tuple[Tuple[int, PlacedField], ...]:
        return fields_on_page(self.session.state, self.current_page)

    def drop(
        self,
        payload: Union[Mapping[str, Any], PlaceDrop, MoveDrop],
        pointer: Point,
        rect: Rect,
    ) -> bool:
        """Apply a drop on the page container; returns ``True`` if a field changed."""
        drop = payload if isinstance(payload, (PlaceDrop, MoveDrop)) else parse_drop(payload)
        before = self.session.state
        action = handle_drop(
            before,
            drop,
            pointer,
            rect,
            signer_email=self.active_signer,
            page=self.current_page,
        )
        if action is None:
            return False
        after = self.session.dispatch(action)
        if after.fields == before.fields:
            return False
        if isinstance(drop, PlaceDrop):
            self._selected_key = after.fields[-1].key
        else:
            self._selected_key = after.fields[drop.index].key
        return True

    def select(self, index: Optional[int]) -> None:
        fields = self.session.state.fields
        if index is None or not 0 <= index < len(fields):
            self._selected_key = None
        else:
            self._sync()
            self._selected_key = fields[index].key

    @property
    def selected_index(self) -> Optional[int]:
        self._sync()
        if self._selected_key is None:
            return None
        index = field_index(self.session.state, self._selected_key)
        if index is None:
            self._selected_key = None
        return index

    @property
    def selected_field(self) -> Optional[PlacedField]:
        index = self.selected_index
        return None if index is None else self.session.state.fields[index]

    def adjust(
        self,
        index: int,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> None:
        """Move or resize a field; type and signer are left untouched."""
        patch = FieldPatch(x=x, y=y, width=width, height=height)
        self.session.dispatch(UpdateField(index=index, patch=patch))

    def remove(self, index: int) -> None:
        self.session.dispatch(RemoveField(index=index))

    def remove_selected(self) -> bool:
        index = self.selected_index
        if index is None:
            return False
        self.remove(index)
        return True

    @property
    def can_continue(self) -> bool:
        return self.session.can_proceed_from_fields

    def back(self) -> bool:
        return self.session.set_step(WizardStep.SIGNERS)

    def next(self) -> bool:
        return self.session.set_step(WizardStep.REVIEW)


class ReviewStep:
    def __init__(self, session: WizardSession, suggester: Suggester = template_suggester):
        self.session = session
        self.suggester = suggester

    def summary(self) -> ReviewSummary:
        return summarize(self.session.state)

    def set_message(self, message: str) -> None:
        self.session.dispatch(SetMessage(message=message))

    async def suggest_message(self) -> bool:
        return await self.session.suggest_message(self.suggester)

    def edit(self, step: WizardStep) -> bool:
        """Jump back to an earlier step from one of the summary cards."""
        if step_index(step) >= step_index(WizardStep.REVIEW):
            return False
        return self.session.set_step(step)

    @property
    def can_send(self) -> bool:
        return self.session.can_send

    @property
    def is_sending(self) -> bool:
        return self.session.state.is_processing

    @property
    def error(self) -> Optional[str]:
        return self.session.state.last_error

    async def send(self, dispatcher: Dispatcher) -> bool:
        return await self.session.send(dispatcher)

    def cancel(self) -> bool:
        return self.session.cancel_send()

    def dismiss_error(self) -> None:
        self.session.dismiss_error()


class SentStep:
    def __init__(self, session: WizardSession):
        self.session = session

    def recipients(self) -> Tuple[Tuple[str, str], ...]:
        return tuple((s.name, s.email) for s in self.session.state.signers)

    @property
    def reference(self) -> Optional[str]:
        result = self.session.last_result
        return result.reference if result else None

    def start_over(self) -> None:
        self.session.start_over()
