"""Intake JSON parsing and structural validation."""

import json
import logging
from typing import Any, Dict

from ..models.intake import FieldSpec, FieldValue, IntakeDocument, Question, Section
from .exceptions import ParseError, StructuralError


logger = logging.getLogger(__name__)


class IntakeParser:
    """
    Builds an IntakeDocument from raw intake JSON.

    Only the root structure is enforced. Question attributes are carried
    over as found; loosely typed ones are wrapped in FieldValue.
    """

    def __init__(self, default_template_version: str = "1.0"):
        self.default_template_version = default_template_version

    def parse(self, json_text: str) -> IntakeDocument:
        """
        Parse intake JSON text.

        Args:
            json_text: Raw JSON document.

        Returns:
            IntakeDocument with sections and questions in document order.

        Raises:
            ParseError: If the text is not valid JSON.
            StructuralError: If required structure is missing.
        """
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            raise ParseError(
                message=str(e),
                location=f"line {e.lineno}, column {e.colno}",
                details={"position": e.pos},
            ) from e
        except TypeError as e:
            raise ParseError(message=f"Expected JSON text, got {type(json_text).__name__}") from e

        return self.parse_data(data)

    def parse_data(self, data: Any) -> IntakeDocument:
        """
        Build an IntakeDocument from already-decoded JSON.

        Raises:
            StructuralError: If required structure is missing.
        """
        if not isinstance(data, dict):
            raise StructuralError(
                message="Invalid JSON structure - expected an object at the root",
                location="$",
            )

        if not data.get("template_name"):
            raise StructuralError(message="Missing template_name in JSON", location="$.template_name")

        flow = data.get("conversation_flow")
        sections = flow.get("sections") if isinstance(flow, dict) else None
        if sections is None:
            raise StructuralError(
                message="Invalid JSON structure - missing conversation_flow.sections",
                location="$.conversation_flow.sections",
            )
        if not isinstance(sections, list):
            raise StructuralError(
                message="Invalid JSON structure - conversation_flow.sections must be a list",
                location="$.conversation_flow.sections",
            )

        document = IntakeDocument(
            template_name=str(data["template_name"]),
            template_version=str(data.get("template_version") or self.default_template_version),
            sections=[self._parse_section(s, i) for i, s in enumerate(sections)],
            raw=data,
        )
        logger.debug(
            f"Parsed intake '{document.template_name}': "
            f"{len(document.sections)} sections, {document.question_count} questions"
        )
        return document

    def _parse_section(self, data: Any, index: int) -> Section:
        """Convert one section object."""
        location = f"$.conversation_flow.sections[{index}]"
        if not isinstance(data, dict):
            raise StructuralError(message=f"Section {index} is not an object", location=location)

        questions = data.get("questions") or []
        if not isinstance(questions, list):
            raise StructuralError(
                message=f"Section {index} questions must be a list",
                location=f"{location}.questions",
            )

        return Section(
            section_id=data.get("section_id") or "",
            section_name=data.get("section_name") or "",
            questions=[
                self._parse_question(q, f"{location}.questions[{j}]")
                for j, q in enumerate(questions)
            ],
        )

    def _parse_question(self, data: Any, location: str) -> Question:
        """Convert one question object."""
        if not isinstance(data, dict):
            raise StructuralError(message="Question is not an object", location=location)

        return Question(
            id=data.get("id") or "",
            question=data.get("question") or "",
            context=data.get("context") or "",
            type=data.get("type") or "text",
            required=data["required"] if "required" in data else True,
            validation=FieldValue.of(data.get("validation")),
            maps_to=FieldValue.of(data.get("maps_to")),
            default=data.get("default"),
            examples=FieldValue.of(data.get("examples")),
            options=FieldValue.of(data.get("options")),
            fields=self._parse_fields(data.get("fields")),
            max_items=data.get("max_items"),
            file_types=data.get("file_types"),
            max_size=data.get("max_size"),
        )

    @staticmethod
    def _parse_fields(data: Any) -> Dict[str, FieldSpec]:
        """Convert the nested field map of a structured question."""
        if not isinstance(data, dict):
            return {}

        fields: Dict[str, FieldSpec] = {}
        for name, config in data.items():
            # A bare value is treated as a field with no configuration
            config = config if isinstance(config, dict) else {}
            fields[name] = FieldSpec(
                name=name,
                type=config.get("type"),
                required=config.get("required"),
                validation=config.get("validation"),
                max_length=config.get("max_length"),
                default=config.get("default"),
            )
        return fields


def parse_intake_json(json_text: str, default_template_version: str = "1.0") -> IntakeDocument:
    """Convenience function to parse intake JSON text."""
    return IntakeParser(default_template_version=default_template_version).parse(json_text)
