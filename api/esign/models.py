
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field as ORMField

class Contact(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    email: str = ORMField(index=True)
    phone: Optional[str] = None
    kind: str = "tenant"  # tenant|user
    role: str = "TENANT"
    created_at: datetime = ORMField(default_factory=datetime.utcnow)

class Document(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    filename: str
    content_type: str = "application/pdf"
    s3_key: str
    size: int = 0
    page_count: int = 1
    created_at: datetime = ORMField(default_factory=datetime.utcnow)

class Envelope(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    document_id: int
    subject: str = "Please sign"
    message: str = ""
    status: str = "sent"  # sent|completed|cancelled
    created_at: datetime = ORMField(default_factory=datetime.utcnow)
    sent_at: Optional[datetime] = None

class Signer(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    envelope_id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str = "OTHER"
    routing_order: int = 1
    color: str
    tenant_ref: Optional[str] = None
    user_ref: Optional[str] = None
    status: str = "pending"

class Field(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    envelope_id: int
    signer_id: int
    page: int
    # percent of page width/height
    x: float
    y: float
    w: float
    h: float
    type: str  # SIGNATURE|INITIALS|DATE|...
    required: bool = True
    label: Optional[str] = None
