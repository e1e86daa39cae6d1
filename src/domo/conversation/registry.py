"""Link vendor conversations to the demo they were started for."""

from __future__ import annotations

import logging
from typing import Optional

from domo.errors import ConflictError, NotFoundError
from domo.storage.models import ConversationDetail
from domo.storage.repository import Repository

logger = logging.getLogger(__name__)


def default_conversation_name(conversation_id: str) -> str:
    return f"Conversation {conversation_id[-8:]}"


def link_conversation(
    repo: Repository,
    demo_id: str,
    conversation_id: str,
    conversation_name: Optional[str] = None,
) -> ConversationDetail:
    """Make ``conversation_id`` the demo's active conversation.

    Creates the conversation_details row if needed, so webhook events for the
    conversation resolve to the demo and show up in its report. Linking the
    same pair again is a no-op apart from re-pointing the demo.
    """
    demo = repo.get_demo(demo_id)
    if demo is None:
        raise NotFoundError(f"Unknown demo: {demo_id}")

    existing = repo.get_conversation(conversation_id)
    if existing is not None and existing.demo_id != demo_id:
        raise ConflictError(
            f"Conversation {conversation_id} already belongs to demo {existing.demo_id}"
        )

    if existing is None:
        repo.insert_conversation(
            ConversationDetail(
                demo_id=demo_id,
                tavus_conversation_id=conversation_id,
                conversation_name=conversation_name or default_conversation_name(conversation_id),
            )
        )
        logger.info(f"Linked conversation {conversation_id} to demo {demo_id}")

    repo.set_demo_conversation(demo_id, conversation_id)
    return repo.get_conversation(conversation_id)
