"""In-memory registry of wizard sessions, one per operator tab."""

import secrets
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import DISPATCH_TIMEOUT_SECONDS
from .engine.session import WizardSession
from .engine.views import FieldsStep


@dataclass
class SessionEntry:
    id: str
    session: WizardSession
    fields_view: FieldsStep = field(init=False)

    def __post_init__(self):
        self.fields_view = FieldsStep(self.session)


class SessionStore:
    def __init__(self, dispatch_timeout: Optional[float] = DISPATCH_TIMEOUT_SECONDS):
        self.dispatch_timeout = dispatch_timeout
        self._entries: Dict[str, SessionEntry] = {}

    def create(self) -> SessionEntry:
        sid = secrets.token_urlsafe(16)
        entry = SessionEntry(id=sid, session=WizardSession(dispatch_timeout=self.dispatch_timeout))
        self._entries[sid] = entry
        return entry

    def get(self, sid: str) -> Optional[SessionEntry]:
        return self._entries.get(sid)

    def discard(self, sid: str) -> Optional[SessionEntry]:
        entry = self._entries.pop(sid, None)
        if entry:
            entry.session.start_over()
        return entry

    def __len__(self) -> int:
        return len(self._entries)


store = SessionStore()


def get_store() -> SessionStore:
    return store
