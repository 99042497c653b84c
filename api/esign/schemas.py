
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from .engine.state import ReferenceKind, SignerRole, WizardStep

class DocumentInfoUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None

class SignerIn(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    role: SignerRole = SignerRole.OTHER

class SignerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[SignerRole] = None

class SignerReorder(BaseModel):
    from_index: int
    to_index: int

class KnownSignerToggle(BaseModel):
    selected: bool = True

class PointIn(BaseModel):
    x: float
    y: float

class RectIn(BaseModel):
    left: float = 0.0
    top: float = 0.0
    width: float
    height: float

class FieldDrop(BaseModel):
    payload: Dict[str, Any]  # {"kind": "place", "field_type": ...} | {"kind": "move", "index": ...}
    pointer: PointIn
    rect: RectIn
    signer_email: Optional[str] = None
    page: Optional[int] = None

class FieldUpdate(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

class StepChange(BaseModel):
    step: WizardStep

class MessageUpdate(BaseModel):
    message: str = Field(default="", max_length=2000)

class ContactCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None
    kind: ReferenceKind = ReferenceKind.TENANT
    role: SignerRole = SignerRole.TENANT

class ContactUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    kind: Optional[ReferenceKind] = None
    role: Optional[SignerRole] = None
