import logging
from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from minio.error import S3Error
from pydantic import ValidationError
from sqlmodel import Session

from ..auth import require_operator
from ..db import get_session
from ..dispatch import EnvelopeDispatcher
from ..engine.errors import UploadRejected
from ..engine.geometry import Point, Rect
from ..engine.placement import parse_drop
from ..engine.session import Dispatcher, Suggester
from ..engine.state import SignerCandidate, WizardStep
from ..engine.summary import template_suggester
from ..engine.views import ReviewStep, SentStep, SignersStep, UploadStep
from ..models import Contact
from ..schemas import (
    DocumentInfoUpdate,
    FieldDrop,
    FieldUpdate,
    KnownSignerToggle,
    MessageUpdate,
    SignerIn,
    SignerReorder,
    SignerUpdate,
    StepChange,
)
from ..sessions import SessionEntry, SessionStore, get_store
from ..storage import delete_drafts, delete_object, get_bytes
from ..uploads import read_preview, store_upload
from ..config import MAX_UPLOAD_BYTES
from .contacts import contact_to_candidate

logger = logging.getLogger(__name__)

router = APIRouter()

def get_dispatcher() -> Dispatcher:
    return EnvelopeDispatcher()

def get_suggester() -> Suggester:
    return template_suggester

def _entry(session_id: str, store: SessionStore = Depends(get_store)) -> SessionEntry:
    entry = store.get(session_id)
    if not entry:
        raise HTTPException(404, "session not found")
    return entry

def _editable(entry: SessionEntry = Depends(_entry)) -> SessionEntry:
    state = entry.session.state
    if state.is_processing:
        raise HTTPException(status.HTTP_409_CONFLICT, "send in progress")
    if state.step == WizardStep.SENT:
        raise HTTPException(status.HTTP_409_CONFLICT, "request already sent; start over to edit")
    return entry

def _serialize(entry: SessionEntry):
    wizard = entry.session
    view = entry.fields_view
    return {
        "id": entry.id,
        "state": wizard.state.model_dump(mode="json"),
        "can_proceed_from_upload": wizard.can_proceed_from_upload,
        "can_proceed_from_signers": wizard.can_proceed_from_signers,
        "can_proceed_from_fields": wizard.can_proceed_from_fields,
        "can_send": wizard.can_send,
        "fields_view": {
            "active_signer": view.active_signer,
            "current_page": view.current_page,
            "selected_index": view.selected_index,
        },
    }

def _drafts_in_use(entry: SessionEntry) -> bool:
    # a sent (or sending) request references its upload from the Document row
    state = entry.session.state
    return state.is_processing or state.step == WizardStep.SENT

def _discard_draft(ref: str | None):
    if not ref:
        return
    try:
        delete_object(ref)
    except S3Error as exc:
        logger.warning("could not delete draft upload %s: %s", ref, exc)

# ---------- session ----------

@router.post("", status_code=201)
async def create_session(store: SessionStore = Depends(get_store), ctx=Depends(require_operator)):
    entry = store.create()
    logger.info("created wizard session %s", entry.id)
    return _serialize(entry)

@router.get("/preview/{token}")
def preview_document(token: str):
    resolved = read_preview(token)
    if not resolved:
        raise HTTPException(404, "preview not found")
    key, content_type = resolved
    try:
        data = get_bytes(key)
    except S3Error:
        raise HTTPException(404, "stored file missing for this preview")
    return Response(content=data, media_type=content_type)

@router.get("/{session_id}")
async def get_wizard(entry: SessionEntry = Depends(_entry), ctx=Depends(require_operator)):
    return _serialize(entry)

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_session(session_id: str, store: SessionStore = Depends(get_store), ctx=Depends(require_operator)):
    entry = store.get(session_id)
    if not entry:
        raise HTTPException(404, "session not found")
    keep_drafts = _drafts_in_use(entry)
    store.discard(session_id)
    if keep_drafts:
        return
    try:
        delete_drafts(session_id)
    except S3Error as exc:
        logger.warning("could not delete drafts of session %s: %s", session_id, exc)

# ---------- upload ----------

@router.post("/{session_id}/document")
async def upload_document(
    file: UploadFile = File(...),
    entry: SessionEntry = Depends(_editable),
    ctx=Depends(require_operator),
):
    data = await file.read()
    previous = entry.session.state.document
    try:
        upload, preview = store_upload(entry.id, file.filename or "", file.content_type, data)
        UploadStep(entry.session, max_bytes=MAX_UPLOAD_BYTES).accept(upload, preview)
    except UploadRejected as exc:
        code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if exc.too_large else status.HTTP_400_BAD_REQUEST
        raise HTTPException(code, str(exc))
    if previous:
        _discard_draft(previous.file.ref)
    return _serialize(entry)

@router.patch("/{session_id}/document")
async def update_document(payload: DocumentInfoUpdate, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    if entry.session.state.document is None:
        raise HTTPException(404, "no document uploaded")
    if not UploadStep(entry.session).rename(payload.name, payload.description):
        raise HTTPException(400, "document name cannot be blank")
    return _serialize(entry)

@router.delete("/{session_id}/document")
async def remove_document(entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    document = entry.session.state.document
    UploadStep(entry.session).remove_file()
    if document:
        _discard_draft(document.file.ref)
    return _serialize(entry)

# ---------- signers ----------

@router.post("/{session_id}/signers")
async def add_signer(payload: SignerIn, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    candidate = SignerCandidate(**payload.model_dump())
    if not SignersStep(entry.session).save(candidate):
        raise HTTPException(status.HTTP_409_CONFLICT, "signer needs a name and an email not already added")
    return _serialize(entry)

@router.patch("/{session_id}/signers/{index}")
async def update_signer(index: int, payload: SignerUpdate, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    if not 0 <= index < len(entry.session.state.signers):
        raise HTTPException(404, "signer not found")
    current = entry.session.state.signers[index]
    data = current.model_dump(include=set(SignerCandidate.model_fields))
    data.update({k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "phone"})
    if not SignersStep(entry.session).save(SignerCandidate(**data), editing_index=index):
        raise HTTPException(status.HTTP_409_CONFLICT, "signer update rejected")
    return _serialize(entry)

@router.delete("/{session_id}/signers/{index}")
async def remove_signer(index: int, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    if not 0 <= index < len(entry.session.state.signers):
        raise HTTPException(404, "signer not found")
    SignersStep(entry.session).remove(index)
    return _serialize(entry)

@router.post("/{session_id}/signers/reorder")
async def reorder_signers(payload: SignerReorder, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    SignersStep(entry.session).move(payload.from_index, payload.to_index)
    return _serialize(entry)

@router.post("/{session_id}/signers/known/{contact_id}")
async def toggle_known_signer(
    contact_id: int,
    payload: KnownSignerToggle,
    entry: SessionEntry = Depends(_editable),
    session: Session = Depends(get_session),
    ctx=Depends(require_operator),
):
    contact = session.get(Contact, contact_id)
    if not contact:
        raise HTTPException(404, "contact not found")
    SignersStep(entry.session).toggle_known(contact_to_candidate(contact), payload.selected)
    return _serialize(entry)

# ---------- fields ----------

@router.post("/{session_id}/fields/drop")
async def drop_field(payload: FieldDrop, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    try:
        drop = parse_drop(payload.payload)
    except ValidationError:
        raise HTTPException(400, "invalid drop payload")
    view = entry.fields_view
    if payload.signer_email is not None and not view.choose_signer(payload.signer_email):
        raise HTTPException(400, "unknown signer")
    if payload.page is not None:
        view.go_to_page(payload.page)
    changed = view.drop(
        drop,
        Point(payload.pointer.x, payload.pointer.y),
        Rect(payload.rect.left, payload.rect.top, payload.rect.width, payload.rect.height),
    )
    body = _serialize(entry)
    body["changed"] = changed
    return body

@router.patch("/{session_id}/fields/{index}")
async def update_field(index: int, payload: FieldUpdate, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    fields = entry.session.state.fields
    if not 0 <= index < len(fields):
        raise HTTPException(404, "field not found")
    entry.fields_view.adjust(index, **payload.model_dump())
    return _serialize(entry)

@router.delete("/{session_id}/fields/{index}")
async def remove_field(index: int, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    if not 0 <= index < len(entry.session.state.fields):
        raise HTTPException(404, "field not found")
    entry.fields_view.remove(index)
    return _serialize(entry)

# ---------- navigation & review ----------

@router.post("/{session_id}/step")
async def change_step(payload: StepChange, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    if not entry.session.set_step(payload.step):
        raise HTTPException(status.HTTP_409_CONFLICT, f"cannot move to {payload.step.value} yet")
    return _serialize(entry)

@router.put("/{session_id}/message")
async def set_message(payload: MessageUpdate, entry: SessionEntry = Depends(_editable), ctx=Depends(require_operator)):
    ReviewStep(entry.session).set_message(payload.message)
    return _serialize(entry)

@router.post("/{session_id}/message/suggest")
async def suggest_message(
    entry: SessionEntry = Depends(_editable),
    suggester: Suggester = Depends(get_suggester),
    ctx=Depends(require_operator),
):
    await ReviewStep(entry.session, suggester=suggester).suggest_message()
    return _serialize(entry)

@router.get("/{session_id}/summary")
async def review_summary(entry: SessionEntry = Depends(_entry), ctx=Depends(require_operator)):
    return ReviewStep(entry.session).summary().model_dump(mode="json")

@router.post("/{session_id}/send")
async def send_request(
    entry: SessionEntry = Depends(_entry),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    ctx=Depends(require_operator),
):
    review = ReviewStep(entry.session)
    if not review.can_send:
        detail = "send already in progress" if review.is_sending else "session is not ready to send"
        raise HTTPException(status.HTTP_409_CONFLICT, detail)
    sent = await review.send(dispatcher)
    body = _serialize(entry)
    body["sent"] = sent
    body["reference"] = SentStep(entry.session).reference if sent else None
    return body

@router.post("/{session_id}/send/cancel")
async def cancel_send(entry: SessionEntry = Depends(_entry), ctx=Depends(require_operator)):
    body = _serialize(entry)
    body["cancelled"] = ReviewStep(entry.session).cancel()
    return body

@router.post("/{session_id}/start-over")
async def start_over(entry: SessionEntry = Depends(_entry), ctx=Depends(require_operator)):
    document = entry.session.state.document
    in_use = _drafts_in_use(entry)
    SentStep(entry.session).start_over()
    if document and not in_use:
        _discard_draft(document.file.ref)
    return _serialize(entry)
