"""Operations that can be applied to a :class:`~esign.engine.state.WizardState`.

Each action is a small tagged model; :func:`esign.engine.reducer.reduce` is
the only place they are interpreted.
"""

from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .fields import FieldPatch
from .signers import SignerPatch
from .state import FieldType, SignerCandidate, UploadedFile, WizardStep


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    # user actions dismiss any error left over from a failed send
    keeps_error: ClassVar[bool] = False
    # the only actions accepted while a send is outstanding
    while_processing: ClassVar[bool] = False


class SetStep(_Action):
    type: Literal["set_step"] = "set_step"
    step: WizardStep


class SetFile(_Action):
    type: Literal["set_file"] = "set_file"
    file: UploadedFile
    preview: str


class ClearFile(_Action):
    type: Literal["clear_file"] = "clear_file"


class SetDocumentInfo(_Action):
    type: Literal["set_document_info"] = "set_document_info"
    name: str
    description: Optional[str] = None


class AddSigner(_Action):
    type: Literal["add_signer"] = "add_signer"
    candidate: SignerCandidate


class UpdateSigner(_Action):
    type: Literal["update_signer"] = "update_signer"
    index: int
    patch: SignerPatch


class RemoveSigner(_Action):
    type: Literal["remove_signer"] = "remove_signer"
    index: int


class ReorderSigners(_Action):
    type: Literal["reorder_signers"] = "reorder_signers"
    from_index: int
    to_index: int


class AddField(_Action):
    type: Literal["add_field"] = "add_field"
    signer_email: str
    field_type: FieldType
    page: int = 1
    x: float
    y: float


class UpdateField(_Action):
    type: Literal["update_field"] = "update_field"
    index: int
    patch: FieldPatch


class RemoveField(_Action):
    type: Literal["remove_field"] = "remove_field"
    index: int


class SetMessage(_Action):
    type: Literal["set_message"] = "set_message"
    message: str


class SetError(_Action):
    type: Literal["set_error"] = "set_error"
    error: Optional[str] = None

    keeps_error: ClassVar[bool] = True
    while_processing: ClassVar[bool] = True


class SetSuggesting(_Action):
    type: Literal["set_suggesting"] = "set_suggesting"
    is_suggesting: bool

    keeps_error: ClassVar[bool] = True
    while_processing: ClassVar[bool] = True


class BeginDispatch(_Action):
    type: Literal["begin_dispatch"] = "begin_dispatch"


class DispatchSucceeded(_Action):
    type: Literal["dispatch_succeeded"] = "dispatch_succeeded"

    keeps_error: ClassVar[bool] = True
    while_processing: ClassVar[bool] = True


class DispatchFailed(_Action):
    type: Literal["dispatch_failed"] = "dispatch_failed"
    error: str

    keeps_error: ClassVar[bool] = True
    while_processing: ClassVar[bool] = True


class Reset(_Action):
    type: Literal["reset"] = "reset"

    while_processing: ClassVar[bool] = True


Action = Annotated[
    Union[
        SetStep,
        SetFile,
        ClearFile,
        SetDocumentInfo,
        AddSigner,
        UpdateSigner,
        RemoveSigner,
        ReorderSigners,
        AddField,
        UpdateField,
        RemoveField,
        SetMessage,
        SetError,
        SetSuggesting,
        BeginDispatch,
        DispatchSucceeded,
        DispatchFailed,
        Reset,
    ],
    Field(discriminator="type"),
]
