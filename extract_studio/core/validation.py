# extract_studio/core/validation.py
"""
Field checks over a set of extractors. Every extractor and every field is
checked in one pass so the UI can highlight all offending fields at once.
"""
from typing import Dict, Iterable

from .models import Extractor, ExtractorErrors, ExtractorMode

ValidationErrorSet = Dict[str, ExtractorErrors]


def _missing(value) -> bool:
    return not (value or "").strip()


def validate_extractor(extractor: Extractor) -> ExtractorErrors:
    errors = ExtractorErrors(
        field_name_missing=_missing(extractor.field_name),
        selector_missing=_missing(extractor.selector),
    )
    if extractor.mode == ExtractorMode.ATTRIBUTE:
        errors.attribute_name_missing = _missing(extractor.attribute_name)
    return errors


def validate(extractors: Iterable[Extractor]) -> ValidationErrorSet:
    """Map extractor id -> errors, only for extractors with at least one error."""
    result: ValidationErrorSet = {}
    for extractor in extractors:
        errors = validate_extractor(extractor)
        if errors.any():
            result[extractor.id] = errors
    return result


def can_run(errors: ValidationErrorSet) -> bool:
    return not errors


def clear_field_error(errors: ValidationErrorSet, extractor_id: str, field_name: str) -> None:
    """Clear one flag after the user edits that field; drop the entry once clean."""
    entry = errors.get(extractor_id)
    if entry is None:
        return
    if field_name == "field_name":
        entry.field_name_missing = False
    elif field_name == "selector":
        entry.selector_missing = False
    elif field_name == "attribute_name":
        entry.attribute_name_missing = False if entry.attribute_name_missing is not None else None
    elif field_name == "mode":
        # Switching away from attribute makes the attribute check inapplicable
        entry.attribute_name_missing = None
    if not entry.any():
        del errors[extractor_id]
