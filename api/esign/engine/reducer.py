"""Pure transition function for the signature-request wizard."""

import logging
from pathlib import PurePath

from . import actions as a
from .fields import add_field, remove_field, update_field
from .guards import can_enter, can_send
from .signers import add_signer, remove_signer, reorder_signers, update_signer
from .state import INITIAL_STATE, DocumentInfo, WizardState, WizardStep

logger = logging.getLogger(__name__)


def _set_step(state: WizardState, target: WizardStep) -> WizardState:
    if state.step == WizardStep.SENT:
        # terminal; only a reset leaves it
        return state
    if not can_enter(state, target):
        logger.debug("refused step change %s -> %s", state.step.value, target.value)
        return state
    return state.model_copy(update={"step": target})


def _set_file(state: WizardState, action: a.SetFile) -> WizardState:
    document = DocumentInfo(
        name=PurePath(action.file.filename).stem or action.file.filename,
        file=action.file,
        preview=action.preview,
    )
    # fields placed on a previous document are meaningless on the new one
    return state.model_copy(
        update={
            "document": document,
            "fields": (),
            "document_revision": state.document_revision + 1,
        }
    )


def _clear_file(state: WizardState) -> WizardState:
    return state.model_copy(
        update={"document": None, "fields": (), "document_revision": state.document_revision + 1}
    )


def _set_document_info(state: WizardState, action: a.SetDocumentInfo) -> WizardState:
    if state.document is None or not action.name.strip():
        return state
    document = state.document.model_copy(
        update={"name": action.name, "description": action.description}
    )
    return state.model_copy(update={"document": document})


def _apply(state: WizardState, action) -> WizardState:
    if isinstance(action, a.SetStep):
        return _set_step(state, action.step)
    if isinstance(action, a.SetFile):
        return _set_file(state, action)
    if isinstance(action, a.ClearFile):
        return _clear_file(state)
    if isinstance(action, a.SetDocumentInfo):
        return _set_document_info(state, action)
    if isinstance(action, a.AddSigner):
        return add_signer(state, action.candidate)
    if isinstance(action, a.UpdateSigner):
        return update_signer(state, action.index, action.patch)
    if isinstance(action, a.RemoveSigner):
        return remove_signer(state, action.index)
    if isinstance(action, a.ReorderSigners):
        return reorder_signers(state, action.from_index, action.to_index)
    if isinstance(action, a.AddField):
        return add_field(state, action.signer_email, action.field_type, action.page, action.x, action.y)
    if isinstance(action, a.UpdateField):
        return update_field(state, action.index, action.patch)
    if isinstance(action, a.RemoveField):
        return remove_field(state, action.index)
    if isinstance(action, a.SetMessage):
        return state.model_copy(update={"message": action.message})
    if isinstance(action, a.SetError):
        return state.model_copy(update={"last_error": action.error})
    if isinstance(action, a.SetSuggesting):
        return state.model_copy(update={"is_suggesting": action.is_suggesting})
    if isinstance(action, a.BeginDispatch):
        if not can_send(state):
            return state
        return state.model_copy(update={"is_processing": True})
    if isinstance(action, (a.DispatchSucceeded, a.DispatchFailed)) and not state.is_processing:
        # an outcome without an outstanding send
        return state
    if isinstance(action, a.DispatchSucceeded):
        return state.model_copy(
            update={"step": WizardStep.SENT, "is_processing": False, "last_error": None}
        )
    if isinstance(action, a.DispatchFailed):
        return state.model_copy(
            update={"step": WizardStep.REVIEW, "is_processing": False, "last_error": action.error}
        )
    if isinstance(action, a.Reset):
        return INITIAL_STATE
    raise TypeError(f"unknown action: {action!r}")


def reduce(state: WizardState, action: a.Action) -> WizardState:
    if state.is_processing and not action.while_processing:
        logger.debug("refused %s while a send is outstanding", action.type)
        return state
    if not action.keeps_error and state.last_error is not None:
        state = state.model_copy(update={"last_error": None})
    return _apply(state, action)
