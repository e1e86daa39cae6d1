"""Route an authenticated vendor webhook event to the right handler."""

from __future__ import annotations

import logging

from domo.config import (
    CONTACT_OBJECTIVES,
    PERCEPTION_ANALYSIS_EVENT,
    PRODUCT_INTEREST_OBJECTIVE,
    TRANSCRIPTION_READY_EVENT,
    VIDEO_SHOWCASE_OBJECTIVE,
)
from domo.conversation.registry import default_conversation_name
from domo.storage.models import ConversationDetail
from domo.storage.repository import Repository
from domo.webhook.events import (
    event_type_of,
    extract_video_title,
    is_conversation_ended,
    is_objective_completion,
    objective_name_of,
    output_variables_of,
    parse_tool_call_from_event,
)
from domo.webhook.handlers import (
    handle_contact_info_collection,
    handle_product_interest_discovery,
    handle_video_showcase_objective,
    track_cta_shown,
    track_video_showcase,
)
from domo.webhook.security import event_hash

logger = logging.getLogger(__name__)

RECEIVED = {"received": True}


def dispatch_event(repo: Repository, event: dict, raw_body: bytes) -> dict:
    """Process one webhook event and return the JSON body to answer with."""
    conversation_id = event.get("conversation_id")
    event_type = event_type_of(event)
    tool_call = parse_tool_call_from_event(event)

    if tool_call.name:
        try:
            if not repo.record_webhook_event(event_hash(raw_body), conversation_id, event_type):
                logger.info(f"Ignoring duplicate {tool_call.name} delivery for {conversation_id}")
                return {**RECEIVED, "duplicate": True}
        except Exception as e:
            logger.warning(f"Idempotency check failed for {conversation_id}: {e}")

    if event_type in (TRANSCRIPTION_READY_EVENT, PERCEPTION_ANALYSIS_EVENT):
        _store_analysis(repo, conversation_id, event)
        return RECEIVED

    if is_conversation_ended(event):
        try:
            if not repo.mark_conversation_ended(conversation_id):
                logger.warning(f"No conversation_details row to end for {conversation_id}")
        except Exception as e:
            logger.warning(f"Failed to mark conversation {conversation_id} as ended: {e}")
        return RECEIVED

    if is_objective_completion(event):
        handle_objective_completion(repo, conversation_id, event)
        return RECEIVED

    if tool_call.name in ("fetch_video", "play_video"):
        return handle_fetch_video(
            repo, conversation_id, extract_video_title(tool_call.args), event
        )
    if tool_call.name == "show_trial_cta":
        return handle_show_trial_cta(repo, conversation_id)

    logger.debug(f"No handler for event {event_type!r} ({conversation_id})")
    return RECEIVED


def _store_analysis(repo: Repository, conversation_id: str, event: dict):
    props = event.get("properties") or {}
    data = event.get("data") or {}
    transcript = None
    perception = None
    if event_type_of(event) == TRANSCRIPTION_READY_EVENT:
        transcript = props.get("transcript") or data.get("transcript")
    else:
        perception = props.get("analysis") or data.get("analysis")

    try:
        repo.update_conversation_analysis(
            conversation_id, transcript=transcript, perception_analysis=perception
        )
    except Exception as e:
        logger.warning(f"Failed to update conversation_details for {conversation_id}: {e}")


def ensure_conversation_details(repo: Repository, conversation_id: str) -> None:
    """Create a minimal conversation_details row so reporting can list it."""
    try:
        if repo.get_conversation(conversation_id):
            return
        demo = repo.get_demo_for_conversation(conversation_id)
        if demo is None:
            logger.warning(f"No demo found for conversation {conversation_id}")
            return
        repo.insert_conversation(
            ConversationDetail(
                demo_id=demo.id,
                tavus_conversation_id=conversation_id,
                conversation_name=default_conversation_name(conversation_id),
            )
        )
    except Exception as e:
        logger.error(f"Error ensuring conversation_details for {conversation_id}: {e}")


def handle_objective_completion(repo: Repository, conversation_id: str, event: dict) -> None:
    objective_name = objective_name_of(event)
    output_variables = output_variables_of(event)

    ensure_conversation_details(repo, conversation_id)

    if objective_name == PRODUCT_INTEREST_OBJECTIVE:
        handle_product_interest_discovery(
            repo, conversation_id, objective_name, output_variables, event
        )
    elif objective_name in CONTACT_OBJECTIVES:
        handle_contact_info_collection(
            repo, conversation_id, objective_name, output_variables, event
        )
    elif objective_name == VIDEO_SHOWCASE_OBJECTIVE:
        handle_video_showcase_objective(
            repo, conversation_id, objective_name, output_variables, event
        )
    else:
        logger.info(f"Objective {objective_name!r} completed for {conversation_id}; nothing to store")


def handle_fetch_video(
    repo: Repository, conversation_id: str, video_title: str, event: dict
) -> dict:
    if not video_title:
        logger.warning(f"Missing or invalid video title in tool call for {conversation_id}")
        return {"message": "Invalid or missing video title."}

    demo = repo.get_demo_for_conversation(conversation_id)
    if demo is None:
        # Answer 200 anyway; a retry would not find it either
        logger.error(f"Could not find demo for conversation {conversation_id}")
        return {"message": "Demo not found for conversation."}

    video = repo.get_demo_video(demo.id, video_title)
    if video is None:
        available = [v.title for v in repo.list_demo_videos(demo.id)]
        logger.error(f"No video '{video_title}' in demo {demo.id}; available: {available}")
        return {"message": "Video not found."}

    track_video_showcase(repo, conversation_id, video_title, event)
    return {**RECEIVED, "video_url": video.storage_url}


def handle_show_trial_cta(repo: Repository, conversation_id: str) -> dict:
    demo = repo.get_demo_for_conversation(conversation_id)
    if demo is None:
        logger.error(f"Could not find demo for conversation {conversation_id}")
        return {"message": "Demo not found for conversation."}

    track_cta_shown(repo, conversation_id, demo)
    return {
        **RECEIVED,
        "cta": {
            "cta_title": demo.cta_title,
            "cta_message": demo.cta_message,
            "cta_button_text": demo.cta_button_text,
            "cta_button_url": demo.cta_button_url,
        },
    }
