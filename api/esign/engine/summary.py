"""Figures shown on the review screen."""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from .fields import count_by_page, count_by_signer, signature_marks_by_signer
from .state import SignerRole, WizardState


class SignerSummary(BaseModel):
    name: str
    email: str
    role: SignerRole
    color: str
    initials: str
    order: int
    field_count: int
    signature_marks: int


class ReviewSummary(BaseModel):
    document_name: Optional[str]
    document_description: Optional[str]
    file_name: Optional[str]
    file_size: Optional[str]
    page_count: int
    signers: Tuple[SignerSummary, ...]
    total_fields: int
    signature_fields: int
    fields_per_page: Dict[int, int]
    message: str


def initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part)[:2].upper()


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ("B", "KB", "MB", "GB")
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {units[unit]}"


def summarize(state: WizardState) -> ReviewSummary:
    per_signer = count_by_signer(state)
    marks = signature_marks_by_signer(state)
    document = state.document
    return ReviewSummary(
        document_name=document.name if document else None,
        document_description=document.description if document else None,
        file_name=document.file.filename if document else None,
        file_size=format_file_size(document.file.size) if document else None,
        page_count=document.file.page_count if document else 0,
        signers=tuple(
            SignerSummary(
                name=s.name,
                email=s.email,
                role=s.role,
                color=s.color,
                initials=initials(s.name),
                order=s.order,
                field_count=per_signer[s.email],
                signature_marks=marks[s.email],
            )
            for s in state.signers
        ),
        total_fields=len(state.fields),
        signature_fields=sum(marks.values()),
        fields_per_page=count_by_page(state),
        message=state.message,
    )


def draft_message(state: WizardState) -> str:
    first_names = " and ".join(s.name.split()[0] for s in state.signers if s.name.split())
    document_name = state.document.name if state.document else "document"
    greeting = f"Hi {first_names}," if first_names else "Hi,"
    return (
        f"{greeting}\n\n"
        f"Please review and sign the attached {document_name}. "
        "This document requires your electronic signature to proceed.\n\n"
        "If you have any questions, please don't hesitate to reach out.\n\n"
        "Thank you!"
    )


async def template_suggester(state: WizardState) -> str:
    return draft_message(state)
