"""Shared fixtures for the Intake Sheets test suite."""

import json
from datetime import datetime

import pytest

from intake_sheets.storage.database import DatabaseManager
from intake_sheets.storage.lock_manager import LockManager
from intake_sheets.storage.sheet_store import SheetStore


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def contact_intake():
    """Small template with one standard and one social links question."""
    return {
        "template_name": "Contact",
        "conversation_flow": {
            "sections": [
                {
                    "section_id": "s1",
                    "section_name": "Basics",
                    "questions": [
                        {"id": "q1", "question": "Name?", "type": "text"},
                        {
                            "id": "q2",
                            "question": "Links",
                            "type": "social_links_object",
                            "fields": {"twitter": {"type": "url"}},
                        },
                    ],
                }
            ]
        },
    }


@pytest.fixture
def contact_json(contact_intake):
    return json.dumps(contact_intake)


@pytest.fixture
def business_intake():
    """Template exercising every question type."""
    return {
        "template_name": "Business Profile",
        "template_version": "2.1",
        "conversation_flow": {
            "sections": [
                {
                    "section_id": "company",
                    "section_name": "Company",
                    "questions": [
                        {
                            "id": "company_name",
                            "question": "What is your company called?",
                            "context": "Shown on the homepage",
                            "type": "text",
                            "validation": {"min_length": 2, "max_length": 80},
                            "maps_to": ["site.title", "seo.title"],
                            "examples": ["Acme Corp", "Globex"],
                        },
                        {
                            "id": "industry",
                            "question": "Which industry?",
                            "type": "select",
                            "required": False,
                            "options": [
                                {"value": "tech", "label": "Technology"},
                                {"label": "Retail"},
                            ],
                        },
                        {
                            "id": "tagline",
                            "question": "Tagline",
                            "type": "textarea",
                            "validation": 140,
                            "default": "We build things",
                        },
                    ],
                },
                {
                    "section_id": "offer",
                    "section_name": "Offer",
                    "questions": [
                        {
                            "id": "services",
                            "question": "Main service",
                            "type": "service_object",
                            "maps_to": "services",
                            "fields": {
                                "title": {"type": "text", "required": True, "max_length": 60},
                                "price": {"type": "number"},
                                "summary": {"validation": "min_length: 20"},
                            },
                        },
                        {
                            "id": "testimonial",
                            "question": "Best testimonial",
                            "type": "testimonial_object",
                            "fields": {
                                "quote": {"required": True},
                                "author": {"default": "Anonymous"},
                            },
                        },
                        {
                            "id": "highlights",
                            "question": "Highlights",
                            "type": "text_array",
                            "max_items": 5,
                            "validation": "no_duplicates",
                        },
                        {
                            "id": "brochure",
                            "question": "Upload a brochure",
                            "type": "file_upload",
                            "validation": "required field",
                            "file_types": ["pdf", "png"],
                            "max_size": 5,
                        },
                    ],
                },
            ]
        },
    }


@pytest.fixture
def db_manager(tmp_path):
    """DatabaseManager on a fresh SQLite file."""
    manager = DatabaseManager(database_url=f"sqlite:///{tmp_path / 'sheets.db'}")
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def sheet_store(db_manager):
    return SheetStore(db_manager, clock=lambda: FIXED_NOW)


@pytest.fixture
def lock_manager(db_manager, sheet_store):
    return LockManager(db_manager, sheet_store)
