"""Drag-and-drop placement of fields.

A drop carries one of two payloads, told apart only by their ``kind`` tag:

* ``{"kind": "place", "field_type": "SIGNATURE"}`` creates a new field of
  that type for the active signer;
* ``{"kind": "move", "index": 3}`` repositions an existing field, keeping its
  type, signer and size.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .actions import AddField, UpdateField
from .fields import FieldPatch
from .geometry import Point, Rect, clamp, to_percent
from .state import FieldType, WizardState


class PlaceDrop(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["place"] = "place"
    field_type: FieldType


class MoveDrop(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["move"] = "move"
    index: int


Drop = Annotated[Union[PlaceDrop, MoveDrop], Field(discriminator="kind")]

_drop_adapter = TypeAdapter(Drop)


def parse_drop(payload: Mapping[str, Any]) -> Union[PlaceDrop, MoveDrop]:
    """Validate a raw transfer payload; raises ``pydantic.ValidationError``."""
    return _drop_adapter.validate_python(payload)


def handle_drop(
    state: WizardState,
    drop: Union[PlaceDrop, MoveDrop],
    pointer: Point,
    rect: Rect,
    *,
    signer_email: Optional[str],
    page: int = 1,
) -> Optional[Union[AddField, UpdateField]]:
    """Translate a drop into the action to dispatch, or ``None`` to ignore it."""
    if rect.is_empty:
        return None
    x, y = clamp(*to_percent(pointer, rect))

    if isinstance(drop, MoveDrop):
        if not 0 <= drop.index < len(state.fields):
            return None
        return UpdateField(index=drop.index, patch=FieldPatch(x=x, y=y))

    if not signer_email:
        return None
    return AddField(signer_email=signer_email, field_type=drop.field_type, page=page, x=x, y=y)
