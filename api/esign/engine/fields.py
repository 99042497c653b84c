"""Ordered registry of fields placed on the document."""

from collections import Counter
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .constants import DEFAULT_FIELD_SIZES, FIELD_LABELS, SIGNATURE_MARK_TYPES
from .geometry import clamp, clamp_size
from .signers import has_signer
from .state import FieldType, PlacedField, WizardState


class FieldPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


def page_count(state: WizardState) -> int:
    return state.document.file.page_count if state.document else 1


def add_field(
    state: WizardState,
    signer_email: str,
    field_type: FieldType,
    page: int,
    x: float,
    y: float,
) -> WizardState:
    if state.document is None or not has_signer(state, signer_email):
        return state
    if not 1 <= page <= page_count(state):
        return state
    width, height = DEFAULT_FIELD_SIZES[field_type]
    x, y = clamp(x, y)
    field = PlacedField(
        signer_email=signer_email,
        type=field_type,
        page=page,
        x=x,
        y=y,
        width=width,
        height=height,
        label=FIELD_LABELS[field_type],
    )
    return state.model_copy(update={"fields": state.fields + (field,)})


def update_field(state: WizardState, index: int, patch: FieldPatch) -> WizardState:
    if not 0 <= index < len(state.fields):
        return state
    current = state.fields[index]
    changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        return state
    if "x" in changes or "y" in changes:
        changes["x"], changes["y"] = clamp(changes.get("x", current.x), changes.get("y", current.y))
    if "width" in changes or "height" in changes:
        changes["width"], changes["height"] = clamp_size(
            changes.get("width", current.width), changes.get("height", current.height)
        )
    updated = current.model_copy(update=changes)
    fields = state.fields[:index] + (updated,) + state.fields[index + 1:]
    return state.model_copy(update={"fields": fields})


def remove_field(state: WizardState, index: int) -> WizardState:
    if not 0 <= index < len(state.fields):
        return state
    return state.model_copy(update={"fields": state.fields[:index] + state.fields[index + 1:]})


def field_index(state: WizardState, key: str) -> Optional[int]:
    for i, field in enumerate(state.fields):
        if field.key == key:
            return i
    return None


def fields_for_signer(state: WizardState, email: str) -> Tuple[PlacedField, ...]:
    return tuple(f for f in state.fields if f.signer_email == email)


def fields_on_page(state: WizardState, page: int) -> Tuple[Tuple[int, PlacedField], ...]:
    """Fields on ``page`` paired with their registry index."""
    return tuple((i, f) for i, f in enumerate(state.fields) if f.page == page)


def count_by_signer(state: WizardState) -> Dict[str, int]:
    counts = {s.email: 0 for s in state.signers}
    for field in state.fields:
        if field.signer_email in counts:
            counts[field.signer_email] += 1
    return counts


def signature_marks_by_signer(state: WizardState) -> Dict[str, int]:
    counts = {s.email: 0 for s in state.signers}
    for field in state.fields:
        if field.type in SIGNATURE_MARK_TYPES and field.signer_email in counts:
            counts[field.signer_email] += 1
    return counts


def count_by_page(state: WizardState) -> Dict[int, int]:
    return dict(sorted(Counter(f.page for f in state.fields).items()))


def signers_without_fields(state: WizardState) -> Tuple[str, ...]:
    return tuple(email for email, count in count_by_signer(state).items() if count == 0)
