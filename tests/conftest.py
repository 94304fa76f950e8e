"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from escape_room.config import get_settings  # noqa: E402
from escape_room.payload import parse_payload  # noqa: E402
from escape_room.scheduler import ManualScheduler  # noqa: E402
from escape_room.session import EscapeRoomSession  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Settings are cached; start every test from defaults."""
    for name in ("MISMATCH_DELAY_MS", "GAP_MARKER", "SHUFFLE_SEED", "LOG_LEVEL", "OUTPUT_DIR"):
        monkeypatch.delenv(f"ESCAPE_ROOM_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def payload_data():
    """A small payload in wire format."""
    return {
        "title": "Verbs <Unit 1>",
        "introText": "Find your way out & learn some verbs.",
        "mcqSet1": [
            {"question": "Past of 'go'?", "options": ["goed", "went", "gone"], "correctIndex": 1},
            {"question": "Past of 'eat'?", "options": ["ate", "eated"], "correctIndex": 0},
        ],
        "mcqSet2": [
            {"question": "Past of 'see'?", "options": ["saw", "seen"], "correctIndex": 0},
        ],
        "matchingSet1": [
            {"left": "go", "right": "went"},
            {"left": "eat", "right": "ate"},
            {"left": "see", "right": "saw"},
        ],
        "matchingSet2": [
            {"left": "I", "right": "run"},
            {"left": "She", "right": "runs"},
        ],
        "fillGap": {
            "textWithPlaceholders": "We [GAP] games and [GAP] paper.",
            "answers": ["play", "cut"],
            "distractors": ["played"],
        },
        "openQuestions": [
            {"question": "Why do verbs change?", "modelAnswer": "To show tense."},
            {"question": "Name an irregular verb.", "modelAnswer": "go"},
        ],
    }


@pytest.fixture
def payload(payload_data):
    """The small payload, parsed."""
    return parse_payload(payload_data)


@pytest.fixture
def scheduler():
    """Scheduler driven by a manual clock."""
    return ManualScheduler()


@pytest.fixture
def make_session(payload, scheduler):
    """Factory for sessions on the small payload with a manual clock."""
    def factory(preview=False, content=None):
        return EscapeRoomSession(
            content or payload,
            preview=preview,
            scheduler=scheduler,
            rng=random.Random(7),
            mismatch_delay=0.5,
        )
    return factory


@pytest.fixture
def session(make_session):
    """A learner session (no preview) on the small payload."""
    return make_session()
