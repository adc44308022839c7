"""Conversion between intake forms and the flat multipart wire format.

The backend reads submissions as ``multipart/form-data`` with one key per
value:

    student_information.first_name       -> "Ana"
    service_needs.service_category[0]    -> "mental health"
    insurance_information.has_insurance  -> "no"
    authorization_consent                -> "true"

Empty and inapplicable values are left out entirely. On update the backend
keeps any field that is absent, while an empty string would clear it.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from student_intake.models.intake import (
    HasInsurance,
    InsuranceCard,
    IntakeDraft,
    IntakeForm,
    IntakeFormDetails,
)

logger = logging.getLogger(__name__)

CARD_FIELDS = ("insurance_card_front", "insurance_card_back")
TOP_LEVEL_FIELDS = (
    "service_request_type",
    "immediate_safety_concern",
    "authorization_consent",
)
CAPTCHA_FIELD = "captcha_token"

_INDEXED_KEY = re.compile(r"^(?P<base>.+)\[(?P<index>\d+)\]$")


@dataclass
class WirePayload:
    """Flattened form ready to send.

    Attributes:
        fields: Text parts keyed by dotted/indexed path.
        files: Binary parts keyed by dotted path.
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, InsuranceCard] = field(default_factory=dict)

    def to_multipart(self) -> list[tuple[str, tuple[Any, ...]]]:
        """Return every part in the shape httpx accepts for ``files=``.

        Text parts carry no filename so httpx encodes them as plain form
        fields; passing everything through ``files`` keeps the request
        multipart even when no card images are attached.
        """
        parts: list[Any] = [
            (key, (None, value.encode("utf-8"))) for key, value in self.fields.items()
        ]
        parts.extend(
            (key, (card.filename, card.content, card.content_type))
            for key, card in self.files.items()
        )
        return parts


def _wire_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def _flatten(prefix: str, values: Mapping[str, Any], out: dict[str, str]) -> None:
    """Add one section's non-empty values to ``out`` under ``prefix``."""
    for key, value in values.items():
        if _is_empty(value):
            continue
        if isinstance(value, list):
            for index, item in enumerate(value):
                out[f"{prefix}.{key}[{index}]"] = _wire_value(item)
        else:
            out[f"{prefix}.{key}"] = _wire_value(value)


def serialize_intake(form: IntakeForm, captcha_token: str | None = None) -> WirePayload:
    """Flatten a validated form into its wire representation.

    Args:
        form: Validated intake form.
        captcha_token: Optional CAPTCHA response to include.

    Returns:
        WirePayload with text fields and any insurance card images.
    """
    payload = WirePayload()
    fields = payload.fields

    student = form.student_information
    _flatten(
        "student_information",
        {
            "first_name": student.first_name,
            "last_name": student.last_name,
            "full_name": student.full_name,
            "grade": student.grade,
            "school": student.school,
            "date_of_birth": student.date_of_birth,
            "student_id": student.student_id,
        },
        fields,
    )
    _flatten(
        "parent_guardian_contact", form.parent_guardian_contact.model_dump(), fields
    )
    fields["service_request_type"] = _wire_value(form.service_request_type)

    insurance = form.insurance_information
    fields["insurance_information.has_insurance"] = insurance.has_insurance
    if isinstance(insurance, HasInsurance):
        _flatten(
            "insurance_information",
            insurance.model_dump(exclude={"has_insurance", *CARD_FIELDS}),
            fields,
        )
        for name in CARD_FIELDS:
            card = getattr(insurance, name)
            if card is not None:
                payload.files[f"insurance_information.{name}"] = card

    _flatten("service_needs", form.service_needs.model_dump(), fields)

    if form.demographics is not None:
        _flatten("demographics", form.demographics.model_dump(), fields)

    fields["immediate_safety_concern"] = _wire_value(form.immediate_safety_concern)
    fields["authorization_consent"] = _wire_value(form.authorization_consent)

    if captcha_token:
        fields[CAPTCHA_FIELD] = captcha_token

    logger.debug(
        "Serialized intake form: %d fields, %d files",
        len(payload.fields),
        len(payload.files),
    )
    return payload


def deserialize_payload(
    fields: Mapping[str, str],
    files: Mapping[str, InsuranceCard] | None = None,
) -> IntakeDraft:
    """Rebuild a draft from flat wire fields.

    Indexed values are read from ``[0]`` upward and stop at the first
    missing index. Unknown keys, the derived full name and the CAPTCHA token
    are ignored.

    Args:
        fields: Text parts as sent on the wire.
        files: Optional binary parts.

    Returns:
        IntakeDraft holding the decoded values.
    """
    data: dict[str, Any] = {}
    indexed: dict[str, dict[int, str]] = {}

    for key, value in fields.items():
        match = _INDEXED_KEY.match(key)
        if match:
            indexed.setdefault(match["base"], {})[int(match["index"])] = value
            continue
        if key in TOP_LEVEL_FIELDS:
            data[key] = value
            continue
        section, sep, name = key.partition(".")
        if sep:
            data.setdefault(section, {})[name] = value

    for base, items in indexed.items():
        section, sep, name = base.partition(".")
        if not sep:
            continue
        values: list[str] = []
        index = 0
        while index in items:
            values.append(items[index])
            index += 1
        data.setdefault(section, {})[name] = values

    for key, card in (files or {}).items():
        name = key.rpartition(".")[2]
        if name in CARD_FIELDS:
            data.setdefault("insurance_information", {})[name] = card

    return IntakeDraft.model_validate(data)


def details_to_draft(details: IntakeFormDetails | Mapping[str, Any]) -> IntakeDraft:
    """Turn a details-endpoint body into an editable draft."""
    if not isinstance(details, IntakeFormDetails):
        details = IntakeFormDetails.model_validate(details)
    return details.to_draft()
