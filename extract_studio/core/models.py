# extract_studio/core/models.py
"""
Core data models for the Extract Studio application.
"""
import copy
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class ExtractorMode(str, Enum):
    TEXT = "text"
    ATTRIBUTE = "attribute"
    CHILD_LINK_URL = "child-link-url"
    CHILD_LINK_TEXT = "child-link-text"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"

    @property
    def extension(self) -> str:
        return {"json": ".json", "csv": ".csv", "excel": ".xlsx"}[self.value]


class LogLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


# One matched record: field name -> extracted value (None when absent)
ResultItem = Dict[str, Optional[str]]


def new_extractor_id() -> str:
    """Time-based identifier, unique enough for user-created extractors."""
    return str(time.time_ns())


@dataclass
class Extractor:
    """A single named field rule: where to find it and how to read it."""
    id: str
    field_name: str = ""
    selector: str = ""
    mode: ExtractorMode = ExtractorMode.TEXT
    attribute_name: str = ""


def new_extractor(**fields) -> Extractor:
    return Extractor(id=new_extractor_id(), **fields)


@dataclass
class Profile:
    """The full configuration of one extraction run; the unit of persistence."""
    url: str = ""
    file_name: str = ""
    export_format: ExportFormat = ExportFormat.JSON
    debug_mode: bool = False
    extractors: List[Extractor] = field(default_factory=list)
    session_reference: Optional[str] = None

    @classmethod
    def empty(cls) -> "Profile":
        return cls()

    def snapshot(self) -> "Profile":
        """Deep copy; later edits to this profile never reach the copy."""
        return copy.deepcopy(self)

    def find_extractor(self, extractor_id: str) -> Optional[Extractor]:
        for extractor in self.extractors:
            if extractor.id == extractor_id:
                return extractor
        return None


@dataclass
class LogMessage:
    level: LogLevel
    text: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class ExtractorErrors:
    """Per-field validation flags; attribute_name_missing is None when not applicable."""
    field_name_missing: bool = False
    selector_missing: bool = False
    attribute_name_missing: Optional[bool] = None

    def any(self) -> bool:
        return self.field_name_missing or self.selector_missing or bool(self.attribute_name_missing)

    def missing_fields(self) -> List[str]:
        """Names of the Extractor attributes flagged as missing, in form order."""
        missing = []
        if self.field_name_missing:
            missing.append("field_name")
        if self.selector_missing:
            missing.append("selector")
        if self.attribute_name_missing:
            missing.append("attribute_name")
        return missing


@dataclass
class RunResult:
    item_count: int
    file_name: str
