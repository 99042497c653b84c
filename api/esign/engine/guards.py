"""Predicates gating forward movement through the wizard.

Each guard includes the guards of the steps before it, so a later guard
holding implies every earlier one holds too.
"""

from .fields import signers_without_fields
from .state import WizardState, WizardStep, step_index


def can_proceed_from_upload(state: WizardState) -> bool:
    return state.document is not None


def can_proceed_from_signers(state: WizardState) -> bool:
    return can_proceed_from_upload(state) and len(state.signers) > 0


def can_proceed_from_fields(state: WizardState) -> bool:
    return (
        can_proceed_from_signers(state)
        and len(state.fields) > 0
        and not signers_without_fields(state)
    )


def can_send(state: WizardState) -> bool:
    return (
        can_proceed_from_fields(state)
        and state.step == WizardStep.REVIEW
        and not state.is_processing
    )


_ENTRY_GUARDS = {
    WizardStep.SIGNERS: can_proceed_from_upload,
    WizardStep.FIELDS: can_proceed_from_signers,
    WizardStep.REVIEW: can_proceed_from_fields,
}


def can_enter(state: WizardState, target: WizardStep) -> bool:
    if step_index(target) <= step_index(state.step):
        return True
    guard = _ENTRY_GUARDS.get(target)
    # SENT is only reachable through a successful dispatch
    return guard is not None and guard(state)
