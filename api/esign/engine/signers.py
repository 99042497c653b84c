"""Ordered signer registry.

Signers are identified by e-mail (exact, case-sensitive). Callers check for
an existing e-mail before adding; the registry itself is append-only and does
not de-duplicate.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .constants import SIGNER_COLORS
from .state import ExternalRef, Signer, SignerCandidate, SignerRole, WizardState


class SignerPatch(BaseModel):
    # color and order are owned by the registry
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[SignerRole] = None
    reference: Optional[ExternalRef] = None


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def _renumber(signers: Tuple[Signer, ...]) -> Tuple[Signer, ...]:
    return tuple(
        s if s.order == i + 1 else s.model_copy(update={"order": i + 1})
        for i, s in enumerate(signers)
    )


def next_color(state: WizardState) -> str:
    return SIGNER_COLORS[len(state.signers) % len(SIGNER_COLORS)]


def add_signer(state: WizardState, candidate: SignerCandidate) -> WizardState:
    if _blank(candidate.name) or _blank(candidate.email):
        return state
    signer = Signer(
        **candidate.model_dump(),
        color=next_color(state),
        order=len(state.signers) + 1,
    )
    return state.model_copy(update={"signers": state.signers + (signer,)})


def update_signer(state: WizardState, index: int, patch: SignerPatch) -> WizardState:
    if not 0 <= index < len(state.signers):
        return state
    current = state.signers[index]
    changes = patch.model_dump(exclude_unset=True)
    for key in ("name", "email", "role"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    updated = current.model_copy(update=changes)
    if _blank(updated.name) or _blank(updated.email):
        return state

    fields = state.fields
    if updated.email != current.email:
        if any(s.email == updated.email for i, s in enumerate(state.signers) if i != index):
            return state
        fields = tuple(
            f.model_copy(update={"signer_email": updated.email}) if f.signer_email == current.email else f
            for f in state.fields
        )
    signers = state.signers[:index] + (updated,) + state.signers[index + 1:]
    return state.model_copy(update={"signers": signers, "fields": fields})


def remove_signer(state: WizardState, index: int) -> WizardState:
    if not 0 <= index < len(state.signers):
        return state
    removed = state.signers[index]
    signers = _renumber(state.signers[:index] + state.signers[index + 1:])
    fields = tuple(f for f in state.fields if f.signer_email != removed.email)
    return state.model_copy(update={"signers": signers, "fields": fields})


def reorder_signers(state: WizardState, from_index: int, to_index: int) -> WizardState:
    count = len(state.signers)
    if not (0 <= from_index < count and 0 <= to_index < count) or from_index == to_index:
        return state
    signers = list(state.signers)
    moved = signers.pop(from_index)
    signers.insert(to_index, moved)
    return state.model_copy(update={"signers": _renumber(tuple(signers))})


def find_signer(state: WizardState, email: str) -> Optional[Signer]:
    for signer in state.signers:
        if signer.email == email:
            return signer
    return None


def signer_index(state: WizardState, email: str) -> Optional[int]:
    for i, signer in enumerate(state.signers):
        if signer.email == email:
            return i
    return None


def has_signer(state: WizardState, email: str) -> bool:
    return find_signer(state, email) is not None


def index_by_reference(state: WizardState, reference: ExternalRef) -> Optional[int]:
    for i, signer in enumerate(state.signers):
        if signer.reference == reference:
            return i
    return None


def signer_color(state: WizardState, email: str) -> str:
    signer = find_signer(state, email)
    return signer.color if signer else SIGNER_COLORS[0]
