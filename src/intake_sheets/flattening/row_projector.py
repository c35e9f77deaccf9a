"""Projection of intake questions into flat sheet rows."""

import logging
from dataclasses import replace
from typing import List

from ..models.enums import QuestionType
from ..models.intake import FieldSpec, Question, Section
from ..models.rows import FlatRow
from .formatters import (
    format_examples,
    format_maps_to,
    format_options,
    format_validation,
    stringify,
)


logger = logging.getLogger(__name__)

SOCIAL_LINK_VALIDATION = "format: url"


class RowProjector:
    """
    Converts one question and its section into flat rows.

    Standard questions give exactly one row. Structured questions give a
    parent row first, followed by one row per nested field for object
    types. ``text_array`` and ``file_upload`` amend the parent row's
    validation instead of adding rows. All rows for a question are built
    before they are returned.
    """

    def __init__(self, default_max_items: int = 10):
        """
        Initialize the projector.

        Args:
            default_max_items: Item limit used for ``text_array`` questions
                that do not declare ``max_items``.
        """
        self.default_max_items = default_max_items

    def project(self, question: Question, section: Section) -> List[FlatRow]:
        """Project a question using the path its type requires."""
        if question.is_complex:
            return self.project_complex(question, section)
        return [self.project_standard(question, section)]

    def project_standard(self, question: Question, section: Section) -> FlatRow:
        """
        Build the single row for a question.

        Args:
            question: The question to project.
            section: The section containing the question.

        Returns:
            FlatRow with all 12 columns filled from the question.
        """
        return FlatRow(
            section_id=section.section_id,
            section_name=section.section_name,
            question_id=question.id,
            question=question.question,
            context=question.context,
            type=question.type or QuestionType.TEXT.value,
            required=question.required,
            validation=format_validation(question.validation),
            maps_to=format_maps_to(question.maps_to),
            default=question.default or "",
            examples=format_examples(question.examples),
            options=format_options(question.options),
        )

    def project_complex(self, question: Question, section: Section) -> List[FlatRow]:
        """
        Build the parent row and any expanded rows for a structured question.

        Unknown types produce only the parent row.

        Args:
            question: The structured question to project.
            section: The section containing the question.

        Returns:
            Rows in output order, parent first.
        """
        parent = self.project_standard(question, section)
        question_type = question.type

        if question_type in (
            QuestionType.SERVICE_OBJECT.value,
            QuestionType.TESTIMONIAL_OBJECT.value,
        ):
            children = [
                self._project_object_field(question, section, spec)
                for spec in question.fields.values()
            ]
            return [parent] + children

        if question_type == QuestionType.SOCIAL_LINKS_OBJECT.value:
            children = [
                self._project_social_link(question, section, spec)
                for spec in question.fields.values()
            ]
            return [parent] + children

        if question_type == QuestionType.TEXT_ARRAY.value:
            max_items = question.max_items or self.default_max_items
            return [replace(parent, validation=f"max_items: {stringify(max_items)}, {parent.validation}")]

        if question_type == QuestionType.FILE_UPLOAD.value:
            return [replace(parent, validation=self._file_constraints(question))]

        logger.debug(f"No expansion rule for type '{question_type}' ({question.id})")
        return [parent]

    def _project_object_field(self, question: Question, section: Section, spec: FieldSpec) -> FlatRow:
        """Row for one field of a service or testimonial object."""
        return FlatRow(
            section_id=section.section_id,
            section_name=section.section_name,
            question_id=f"{question.id}.{spec.name}",
            question=f"{question.question} - {spec.name}",
            context=question.context,
            type=spec.type or QuestionType.TEXT.value,
            required=spec.required or False,
            validation=format_validation(spec.validation or spec.max_length),
            maps_to=f"{format_maps_to(question.maps_to)}.{spec.name}",
            default=spec.default or "",
            examples="",
            options="",
        )

    def _project_social_link(self, question: Question, section: Section, spec: FieldSpec) -> FlatRow:
        """Row for one platform of a social links object."""
        return FlatRow(
            section_id=section.section_id,
            section_name=section.section_name,
            question_id=f"{question.id}.{spec.name}",
            question=f"{question.question} - {spec.name}",
            context=question.context,
            type=spec.type or QuestionType.URL.value,
            required=spec.required or False,
            validation=SOCIAL_LINK_VALIDATION,
            maps_to=f"{format_maps_to(question.maps_to)}.{spec.name}",
            default="",
            examples="",
            options="",
        )

    @staticmethod
    def _file_constraints(question: Question) -> str:
        """Validation text for a file upload; replaces any declared validation."""
        parts = []
        file_types = question.file_types
        if isinstance(file_types, (list, tuple)) or file_types:
            if isinstance(file_types, (list, tuple)):
                file_types = ",".join(stringify(t) for t in file_types)
            parts.append(f"file_types: {stringify(file_types)}")
        if question.max_size:
            parts.append(f"max_size: {stringify(question.max_size)}")
        return ", ".join(parts)
