"""Dispatch collaborator: records the request and e-mails every signer."""

import logging
import smtplib
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import db
from .config import WEB_BASE_URL
from .email import format_sender_name, render_signature_request, send_email
from .engine.errors import DispatchError
from .engine.session import DispatchResult, SignatureRequest
from .engine.state import ReferenceKind
from .models import Document, Envelope, Field, Signer
from .utils import make_token

logger = logging.getLogger(__name__)


def _persist(session: Session, request: SignatureRequest):
    info = request.document
    doc = Document(
        name=info.name,
        description=info.description,
        filename=info.file.filename,
        content_type=info.file.content_type,
        s3_key=info.file.ref,
        size=info.file.size,
        page_count=info.file.page_count,
    )
    session.add(doc)
    session.flush()
    env = Envelope(
        document_id=doc.id,
        subject=f"Please sign: {info.name}",
        message=request.message,
        status="sent",
        sent_at=datetime.utcnow(),
    )
    session.add(env)
    session.flush()

    signer_ids = {}
    for s in request.signers:
        reference = s.reference
        signer = Signer(
            envelope_id=env.id,
            name=s.name,
            email=s.email,
            phone=s.phone,
            role=s.role.value,
            routing_order=s.order,
            color=s.color,
            tenant_ref=reference.id if reference and reference.kind == ReferenceKind.TENANT else None,
            user_ref=reference.id if reference and reference.kind == ReferenceKind.USER else None,
        )
        session.add(signer)
        session.flush()
        signer_ids[s.email] = signer.id
    for f in request.fields:
        session.add(Field(
            envelope_id=env.id,
            signer_id=signer_ids[f.signer_email],
            page=f.page,
            x=f.x,
            y=f.y,
            w=f.width,
            h=f.height,
            type=f.type.value,
            required=f.required,
            label=f.label,
        ))
    session.commit()
    return env.id, signer_ids


class EnvelopeDispatcher:
    def __init__(self, link_base: str = WEB_BASE_URL, requester_name: str | None = None, requester_email: str | None = None):
        self.link_base = link_base.rstrip("/")
        self.requester_name = requester_name
        self.requester_email = requester_email

    async def __call__(self, request: SignatureRequest) -> DispatchResult:
        return await run_in_threadpool(self.deliver, request)

    def deliver(self, request: SignatureRequest) -> DispatchResult:
        try:
            with Session(db.engine) as session:
                envelope_id, signer_ids = _persist(session, request)
        except SQLAlchemyError as exc:
            logger.exception("could not record signature request")
            raise DispatchError("Could not save the signature request. Please try again.") from exc

        sender = format_sender_name(self.requester_name)
        for s in request.signers:
            token = make_token({"signer_id": signer_ids[s.email], "envelope_id": envelope_id})
            link = f"{self.link_base}/sign/{token}"
            field_count = sum(1 for f in request.fields if f.signer_email == s.email)
            subject, text_body, html_body = render_signature_request(
                s.name, request.document.name, request.message, link, field_count
            )
            try:
                send_email(s.email, subject, text_body, html_body=html_body, sender_name=sender, reply_to=self.requester_email)
            except (smtplib.SMTPException, OSError) as exc:
                raise DispatchError(f"Could not email {s.email}. Please try again.") from exc
        logger.info("envelope %s sent to %d signer(s)", envelope_id, len(request.signers))
        return DispatchResult(ok=True, reference=str(envelope_id))
