# extract_studio/core/profile_io.py
"""
Profile file (.b4e) encoding. Loading is tolerant: unknown keys are ignored,
missing fields keep their defaults, and a field of the wrong shape is dropped
on its own instead of failing the whole load.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import (BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError,
                      constr, field_validator)

import config

from .errors import PersistenceError
from .models import ExportFormat, Extractor, ExtractorMode, Profile, new_extractor_id

logger = logging.getLogger("ProfileIO")


class ExtractorDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[Union[StrictStr, StrictInt]] = None
    field_name: StrictStr = Field(default="", alias="fieldName", max_length=config.MAX_FIELD_NAME_LENGTH)
    selector: StrictStr = Field(default="", max_length=config.MAX_SELECTOR_LENGTH)
    mode: ExtractorMode = Field(default=ExtractorMode.TEXT, alias="extractorType")
    attribute_name: Optional[StrictStr] = Field(default="", alias="attributeName")

    def to_extractor(self) -> Extractor:
        extractor_id = str(self.id) if self.id not in (None, "") else new_extractor_id()
        return Extractor(id=extractor_id, field_name=self.field_name, selector=self.selector,
                         mode=self.mode, attribute_name=self.attribute_name or "")


class ProfileDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    url: Optional[constr(strict=True, max_length=config.MAX_URL_LENGTH)] = None
    file_name: Optional[constr(strict=True, max_length=config.MAX_FILE_NAME_LENGTH)] = Field(default=None, alias="fileName")
    debug_mode: Optional[StrictBool] = Field(default=None, alias="debugMode")
    export_format: Optional[ExportFormat] = Field(default=None, alias="exportFormat")
    extractors: Optional[List[ExtractorDocument]] = None
    session_reference: Optional[StrictStr] = Field(default=None, alias="sessionReference")

    @field_validator("url", "file_name", "debug_mode", "export_format", "session_reference", mode="wrap")
    @classmethod
    def skip_wrong_shape(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError as e:
            logger.warning(f"Ignoring profile field '{info.field_name}': {e.errors()[0]['msg']}")
            return None

    @field_validator("extractors", mode="wrap")
    @classmethod
    def skip_bad_extractors(cls, value, handler):
        if value is None:
            return None
        if not isinstance(value, list):
            logger.warning("Ignoring profile field 'extractors': not a list")
            return None
        kept = []
        for index, entry in enumerate(value):
            try:
                kept.append(ExtractorDocument.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping extractor #{index} in profile: {e.errors()[0]['msg']}")
        return kept

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileDocument":
        return cls(
            url=profile.url,
            file_name=profile.file_name,
            debug_mode=profile.debug_mode,
            export_format=profile.export_format,
            extractors=[ExtractorDocument(id=e.id, field_name=e.field_name, selector=e.selector,
                                          mode=e.mode, attribute_name=e.attribute_name)
                        for e in profile.extractors],
            session_reference=profile.session_reference,
        )

    def to_profile(self) -> Profile:
        profile = Profile.empty()
        if self.url is not None:
            profile.url = self.url
        if self.file_name is not None:
            profile.file_name = self.file_name
        if self.debug_mode is not None:
            profile.debug_mode = self.debug_mode
        if self.export_format is not None:
            profile.export_format = self.export_format
        if self.extractors is not None:
            profile.extractors = [doc.to_extractor() for doc in self.extractors]
        profile.session_reference = self.session_reference or None
        return profile


def profile_to_document(profile: Profile) -> Dict[str, Any]:
    return ProfileDocument.from_profile(profile).model_dump(mode="json", by_alias=True, exclude_none=True)


def profile_from_document(data: Any) -> Profile:
    if not isinstance(data, dict):
        raise PersistenceError("Invalid or corrupted profile data")
    return ProfileDocument.model_validate(data).to_profile()


def check_saveable(profile: Profile):
    """Reject profiles whose values exceed what the file format accepts."""
    if len(profile.url) > config.MAX_URL_LENGTH:
        raise PersistenceError(f"URL is too long (max {config.MAX_URL_LENGTH} characters)")
    if len(profile.file_name) > config.MAX_FILE_NAME_LENGTH:
        raise PersistenceError(f"File name is too long (max {config.MAX_FILE_NAME_LENGTH} characters)")
    for extractor in profile.extractors:
        if len(extractor.field_name) > config.MAX_FIELD_NAME_LENGTH:
            raise PersistenceError(f"Field name '{extractor.field_name[:20]}...' is too long "
                                   f"(max {config.MAX_FIELD_NAME_LENGTH} characters)")
        if len(extractor.selector) > config.MAX_SELECTOR_LENGTH:
            raise PersistenceError(f"Selector for '{extractor.field_name}' is too long "
                                   f"(max {config.MAX_SELECTOR_LENGTH} characters)")


def with_profile_extension(path) -> Path:
    path = Path(path)
    if path.suffix.lower() != config.PROFILE_EXTENSION:
        path = path.with_name(path.name + config.PROFILE_EXTENSION)
    return path


def write_profile_file(profile: Profile, path) -> Path:
    check_saveable(profile)
    target = with_profile_extension(Path(path).expanduser().resolve())
    payload = json.dumps(profile_to_document(profile), indent=2, ensure_ascii=False)
    if len(payload.encode("utf-8")) > config.MAX_PROFILE_FILE_BYTES:
        raise PersistenceError("Profile data too large (max 10MB)", path=str(target))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload, encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Could not write profile: {e}", path=str(target)) from e
    logger.info(f"Profile saved to {target}")
    return target


def read_profile_file(path) -> Profile:
    source = Path(path)
    try:
        if source.stat().st_size > config.MAX_PROFILE_FILE_BYTES:
            raise PersistenceError("Profile file too large (max 10MB)", path=str(source))
        content = source.read_text(encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Could not read profile: {e}", path=str(source)) from e
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise PersistenceError("Invalid JSON format in profile file", path=str(source)) from e
    profile = profile_from_document(data)
    logger.info(f"Profile loaded from {source} ({len(profile.extractors)} extractors)")
    return profile
