"""Enumerations for the Intake Sheets system."""

from enum import Enum


class QuestionType(Enum):
    """Question types known to the intake format."""
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    URL = "url"
    SELECT = "select"
    SERVICE_OBJECT = "service_object"
    TESTIMONIAL_OBJECT = "testimonial_object"
    SOCIAL_LINKS_OBJECT = "social_links_object"
    TEXT_ARRAY = "text_array"
    FILE_UPLOAD = "file_upload"


# Types routed through the complex projection path. Membership is exact.
COMPLEX_TYPES = frozenset({
    QuestionType.SERVICE_OBJECT.value,
    QuestionType.TESTIMONIAL_OBJECT.value,
    QuestionType.SOCIAL_LINKS_OBJECT.value,
    QuestionType.TEXT_ARRAY.value,
    QuestionType.FILE_UPLOAD.value,
})


def is_complex_type(question_type: str) -> bool:
    """Check whether a question type needs the complex projection path."""
    return question_type in COMPLEX_TYPES


class ValueShape(Enum):
    """Shape tag of a loosely typed question attribute."""
    ABSENT = "absent"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class SheetColumn(Enum):
    """Columns of a schema sheet, in output order."""
    SECTION_ID = "section_id"
    SECTION_NAME = "section_name"
    QUESTION_ID = "question_id"
    QUESTION = "question"
    CONTEXT = "context"
    TYPE = "type"
    REQUIRED = "required"
    VALIDATION = "validation"
    MAPS_TO = "maps_to"
    DEFAULT = "default"
    EXAMPLES = "examples"
    OPTIONS = "options"

    @property
    def index(self) -> int:
        """Zero-based column position."""
        return list(SheetColumn).index(self)

    @property
    def number(self) -> int:
        """One-based column number as shown in the grid."""
        return self.index + 1


class ProtectionType(Enum):
    """Scope of a protection record."""
    SHEET = "sheet"
    RANGE = "range"
