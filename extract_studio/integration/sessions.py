# extract_studio/integration/sessions.py
"""
Read-only view of saved browser sessions. Each session is described by a
`<id>.session.json` metadata file in the sessions folder.
"""
import json
import logging
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .backend_bridge import SessionProfile, SessionStore

SESSION_FILE_PATTERN = "*.session.json"


class SessionMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    domain: str = ""
    created_at: str = Field(default="", alias="createdAt")
    last_used: str = Field(default="", alias="lastUsed")


class JsonSessionStore(SessionStore):
    def __init__(self, sessions_dir, logger_instance=None):
        self.sessions_dir = Path(sessions_dir)
        self.logger = logger_instance if logger_instance else logging.getLogger("JsonSessionStore")

    def list(self) -> List[SessionProfile]:
        """Sessions, most recently used first. Unreadable files are skipped."""
        if not self.sessions_dir.is_dir():
            return []
        sessions = []
        for path in sorted(self.sessions_dir.glob(SESSION_FILE_PATTERN)):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    meta = SessionMetadata.model_validate(json.load(f))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                self.logger.warning(f"Skipping unreadable session file {path.name}: {e}")
                continue
            sessions.append(SessionProfile(id=meta.id, name=meta.name, domain=meta.domain,
                                           created_at=meta.created_at, last_used=meta.last_used))
        sessions.sort(key=lambda s: s.last_used, reverse=True)
        return sessions
