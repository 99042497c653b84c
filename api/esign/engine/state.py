"""Domain types for a signature-request wizard.

All of these are immutable pydantic models. The wizard never edits a model in
place; :mod:`esign.engine.reducer` builds a new :class:`WizardState` for
every action.
"""

from enum import Enum
from typing import Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class WizardStep(str, Enum):
    UPLOAD = "upload"
    SIGNERS = "signers"
    FIELDS = "fields"
    REVIEW = "review"
    SENT = "sent"


STEP_ORDER = (
    WizardStep.UPLOAD,
    WizardStep.SIGNERS,
    WizardStep.FIELDS,
    WizardStep.REVIEW,
    WizardStep.SENT,
)


def step_index(step: WizardStep) -> int:
    return STEP_ORDER.index(step)


class SignerRole(str, Enum):
    PRIMARY_TENANT = "PRIMARY_TENANT"
    TENANT = "TENANT"
    LANDLORD = "LANDLORD"
    CO_SIGNER = "CO_SIGNER"
    WITNESS = "WITNESS"
    OTHER = "OTHER"


class FieldType(str, Enum):
    SIGNATURE = "SIGNATURE"
    INITIALS = "INITIALS"
    DATE = "DATE"
    NAME = "NAME"
    EMAIL = "EMAIL"
    COMPANY = "COMPANY"
    TITLE = "TITLE"
    TEXTBOX = "TEXTBOX"
    CHECKBOX = "CHECKBOX"
    DROPDOWN = "DROPDOWN"
    RADIO = "RADIO"


class ReferenceKind(str, Enum):
    TENANT = "tenant"
    USER = "user"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ExternalRef(_Frozen):
    """Link from a signer to a tenant record or an internal user, never both."""

    kind: ReferenceKind
    id: str


class UploadedFile(_Frozen):
    filename: str
    content_type: str
    size: int
    ref: str
    page_count: int = Field(default=1, ge=1)


class DocumentInfo(_Frozen):
    name: str
    description: Optional[str] = None
    file: UploadedFile
    preview: str


class SignerCandidate(_Frozen):
    name: str
    email: str
    phone: Optional[str] = None
    role: SignerRole = SignerRole.OTHER
    reference: Optional[ExternalRef] = None


class Signer(SignerCandidate):
    color: str
    order: int


class PlacedField(_Frozen):
    key: str = Field(default_factory=lambda: uuid4().hex)
    signer_email: str
    type: FieldType
    page: int = Field(ge=1)
    x: float
    y: float
    width: float
    height: float
    required: bool = True
    label: Optional[str] = None


class WizardState(_Frozen):
    step: WizardStep = WizardStep.UPLOAD
    document: Optional[DocumentInfo] = None
    signers: Tuple[Signer, ...] = ()
    fields: Tuple[PlacedField, ...] = ()
    message: str = ""
    is_processing: bool = False
    is_suggesting: bool = False
    last_error: Optional[str] = None
    document_revision: int = 0


INITIAL_STATE = WizardState()
