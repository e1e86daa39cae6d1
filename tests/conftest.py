"""Shared test fixtures for Domo."""

from __future__ import annotations

import pytest

from domo.storage.database import Database
from domo.storage.models import ConversationDetail, DemoVideo
from domo.storage.repository import Repository

SAMPLE_CONTEXT = """# Product Tour

Some intro text about the video.

## Video Chapters
1. [0:00 - 0:45] Welcome
2. [0:45 - 2:10] Dashboard overview
3. [2:10 - 3:30]
4. [3:45 - 5:00] Reporting

## Key Features
- Not a chapter
"""


@pytest.fixture
def sample_context():
    """Generated video context with a chapter list."""
    return SAMPLE_CONTEXT


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temp database with schema initialized."""
    db_path = tmp_path / "test.db"
    with Database(db_path) as db:
        yield db


@pytest.fixture
def repo(tmp_db):
    """Repository backed by the temp database."""
    return Repository(tmp_db)


@pytest.fixture
def demo(repo):
    """A demo with a CTA configured."""
    return repo.create_demo(
        "Acme Analytics",
        cta_title="Start your free trial",
        cta_message="Try Acme free for 14 days.",
        cta_button_text="Start trial",
        cta_button_url="https://acme.example.com/trial",
        demo_id="demo-1",
    )


@pytest.fixture
def demo_video(repo, demo, sample_context):
    """A video attached to the demo, with chapters."""
    video = DemoVideo(
        demo_id=demo.id,
        title="Product Tour",
        storage_url="https://cdn.example.com/tour.mp4",
        generated_context=sample_context,
    )
    video.id = repo.add_demo_video(video)
    return video


@pytest.fixture
def conversation(repo, demo):
    """An active conversation belonging to the demo."""
    detail = ConversationDetail(
        demo_id=demo.id,
        tavus_conversation_id="conv-12345678",
        conversation_name="Conversation 12345678",
        started_at="2024-05-01T10:00:00+00:00",
    )
    repo.insert_conversation(detail)
    repo.set_demo_conversation(demo.id, detail.tavus_conversation_id)
    return repo.get_conversation(detail.tavus_conversation_id)

