"""Intake document data models for the Intake Sheets system."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import ValueShape, is_complex_type


@dataclass(frozen=True)
class FieldValue:
    """
    Tagged value of a loosely typed question attribute.

    The intake format lets ``validation``, ``maps_to``, ``examples`` and
    ``options`` carry a string, a number, a list or an object. The shape is
    resolved once here so formatters can dispatch on ``shape``.
    """
    shape: ValueShape
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> "FieldValue":
        """Classify a raw JSON value. Empty scalars count as absent."""
        if isinstance(raw, FieldValue):
            return raw
        if raw is None or raw is False or raw == "":
            return cls(ValueShape.ABSENT)
        if isinstance(raw, dict):
            return cls(ValueShape.MAPPING, raw)
        if isinstance(raw, (list, tuple)):
            return cls(ValueShape.SEQUENCE, list(raw))
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw == 0:
            return cls(ValueShape.ABSENT)
        return cls(ValueShape.SCALAR, raw)

    @property
    def is_absent(self) -> bool:
        return self.shape is ValueShape.ABSENT


ABSENT = FieldValue(ValueShape.ABSENT)


@dataclass
class FieldSpec:
    """Nested field of a structured question."""
    name: str
    type: Optional[str] = None
    required: Any = None
    validation: Any = None
    max_length: Any = None
    default: Any = None


@dataclass
class Question:
    """
    Single question of an intake section.

    ``required`` defaults to True only when the key is absent from the
    source; an explicit null is kept as None.
    """
    id: str = ""
    question: str = ""
    context: str = ""
    type: str = "text"
    required: Any = True
    validation: FieldValue = ABSENT
    maps_to: FieldValue = ABSENT
    default: Any = None
    examples: FieldValue = ABSENT
    options: FieldValue = ABSENT
    fields: Dict[str, FieldSpec] = field(default_factory=dict)
    max_items: Any = None
    file_types: Optional[List[Any]] = None
    max_size: Any = None

    @property
    def is_complex(self) -> bool:
        return is_complex_type(self.type)


@dataclass
class Section:
    """Named, ordered group of questions."""
    section_id: str = ""
    section_name: str = ""
    questions: List[Question] = field(default_factory=list)


@dataclass
class IntakeDocument:
    """
    Root of an intake template.

    Sections keep their document order, which is also the order of the
    rows produced from them.
    """
    template_name: str
    template_version: str = "1.0"
    sections: List[Section] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def question_count(self) -> int:
        """Number of top-level questions across all sections."""
        return sum(len(s.questions) for s in self.sections)
