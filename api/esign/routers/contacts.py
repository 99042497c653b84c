from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from ..auth import require_operator
from ..db import get_session
from ..models import Contact
from ..schemas import ContactCreate, ContactUpdate
from ..engine.state import ExternalRef, ReferenceKind, SignerCandidate, SignerRole

router = APIRouter()

def contact_to_candidate(contact: Contact) -> SignerCandidate:
    return SignerCandidate(
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        role=SignerRole(contact.role),
        reference=ExternalRef(kind=ReferenceKind(contact.kind), id=str(contact.id)),
    )

def _get_contact(session: Session, contact_id: int) -> Contact:
    contact = session.get(Contact, contact_id)
    if not contact:
        raise HTTPException(404, "contact not found")
    return contact

@router.get("")
def list_contacts(kind: ReferenceKind | None = None, session: Session = Depends(get_session), ctx=Depends(require_operator)):
    stmt = select(Contact).order_by(Contact.name, Contact.id)
    if kind is not None:
        stmt = stmt.where(Contact.kind == kind.value)
    return session.exec(stmt).all()

@router.post("", status_code=201)
def create_contact(payload: ContactCreate, session: Session = Depends(get_session), ctx=Depends(require_operator)):
    existing = session.exec(select(Contact).where(Contact.email == payload.email)).first()
    if existing:
        raise HTTPException(409, "contact with this email already exists")
    contact = Contact(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        kind=payload.kind.value,
        role=payload.role.value,
    )
    session.add(contact)
    session.commit()
    session.refresh(contact)
    return contact

@router.get("/{contact_id}")
def get_contact(contact_id: int, session: Session = Depends(get_session), ctx=Depends(require_operator)):
    return _get_contact(session, contact_id)

@router.patch("/{contact_id}")
def update_contact(contact_id: int, payload: ContactUpdate, session: Session = Depends(get_session), ctx=Depends(require_operator)):
    contact = _get_contact(session, contact_id)
    data = payload.model_dump(exclude_unset=True, mode="json")
    for key, value in data.items():
        if value is None and key != "phone":
            continue
        setattr(contact, key, value)
    session.add(contact)
    session.commit()
    session.refresh(contact)
    return contact

@router.delete("/{contact_id}", status_code=204)
def delete_contact(contact_id: int, session: Session = Depends(get_session), ctx=Depends(require_operator)):
    contact = _get_contact(session, contact_id)
    session.delete(contact)
    session.commit()
