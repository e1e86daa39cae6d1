"""Webhook data-capture handlers.

Each handler turns one vendor event into a row in a per-concern table that
the Domo Score reads. Handlers never raise: a failed write is logged and
dropped so the webhook still answers 200 and the vendor does not retry.

Accumulating tables (video showcase) use read-merge-write without a
transaction. Two deliveries racing for the same conversation can lose one
title; the last writer wins and a re-delivery of that title restores it.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from domo.config import DEFAULT_VIDEO_SHOWCASE_NAME, VIDEO_SHOWCASE_OBJECTIVE
from domo.storage.models import Demo
from domo.storage.repository import Repository, now_iso

logger = logging.getLogger(__name__)


def normalize_pain_points(value: Any) -> Optional[list]:
    """Vendors send pain points as a string or a list; store a list or None.

    An empty list is kept as an empty list. Only a missing value or an empty
    string becomes None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value]
    return None


def _text(variables: dict, key: str) -> Optional[str]:
    return variables.get(key) or None


def _event_type(event: Any) -> Optional[str]:
    return event.get("event_type") if isinstance(event, dict) else None


def _merge_titles(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Order-preserving union, dropping blanks."""
    merged: list[str] = []
    for title in [*existing, *new]:
        if title and title not in merged:
            merged.append(title)
    return merged


def handle_product_interest_discovery(
    repo: Repository,
    conversation_id: str,
    objective_name: str,
    output_variables: dict,
    event: dict,
) -> None:
    variables = output_variables or {}
    try:
        repo.upsert_product_interest({
            "conversation_id": conversation_id,
            "objective_name": objective_name,
            "primary_interest": _text(variables, "primary_interest"),
            "pain_points": normalize_pain_points(variables.get("pain_points")),
            "event_type": _event_type(event),
            "raw_payload": event,
            "received_at": now_iso(),
        })
        logger.info(f"Stored product interest for conversation {conversation_id}")
    except Exception as e:
        logger.error(f"Failed to store product interest for conversation {conversation_id}: {e}")


def handle_contact_info_collection(
    repo: Repository,
    conversation_id: str,
    objective_name: str,
    output_variables: dict,
    event: dict,
) -> None:
    variables = output_variables or {}
    try:
        repo.upsert_qualification({
            "conversation_id": conversation_id,
            "first_name": _text(variables, "first_name"),
            "last_name": _text(variables, "last_name"),
            "email": _text(variables, "email"),
            "position": _text(variables, "position"),
            "objective_name": objective_name,
            "event_type": _event_type(event),
            "raw_payload": event,
            "received_at": now_iso(),
        })
        logger.info(f"Stored qualification data for conversation {conversation_id}")
    except Exception as e:
        logger.error(f"Failed to store qualification data for conversation {conversation_id}: {e}")


def _accumulate_videos(
    repo: Repository,
    conversation_id: str,
    titles: list[str],
    objective_name: str,
    event: Any,
) -> None:
    existing = repo.get_video_showcase(conversation_id)
    received_at = now_iso()

    if existing and existing.id is not None:
        merged = _merge_titles(existing.videos_shown, titles)
        repo.update_video_showcase(existing.id, {
            "videos_shown": merged or None,
            "event_type": _event_type(event),
            "received_at": received_at,
        })
    else:
        merged = _merge_titles([], titles)
        repo.insert_video_showcase({
            "conversation_id": conversation_id,
            "objective_name": objective_name,
            "videos_shown": merged or None,
            "event_type": _event_type(event),
            "received_at": received_at,
        })


def handle_video_showcase_objective(
    repo: Repository,
    conversation_id: str,
    objective_name: str,
    output_variables: dict,
    event: dict,
) -> None:
    try:
        variables = output_variables if isinstance(output_variables, dict) else {}
        shown = variables.get("videos_shown")
        if isinstance(shown, str):
            titles = [shown]
        elif isinstance(shown, list):
            titles = [t for t in shown if isinstance(t, str)]
        else:
            titles = []

        _accumulate_videos(
            repo, conversation_id, titles,
            objective_name or VIDEO_SHOWCASE_OBJECTIVE, event,
        )
        logger.info(f"Stored video showcase objective for conversation {conversation_id}")
    except Exception as e:
        logger.error(f"Failed to store video showcase for conversation {conversation_id}: {e}")


def track_video_showcase(
    repo: Repository,
    conversation_id: str,
    video_title: str,
    event: Any = None,
) -> None:
    """Add a fetched video's title to the conversation's showcase list."""
    try:
        _accumulate_videos(
            repo, conversation_id, [video_title], DEFAULT_VIDEO_SHOWCASE_NAME, event,
        )
        logger.info(f"Tracked video '{video_title}' for conversation {conversation_id}")
    except Exception as e:
        logger.warning(f"Error tracking video showcase for conversation {conversation_id}: {e}")


def track_cta_shown(repo: Repository, conversation_id: str, demo: Demo) -> None:
    """Record that the CTA was shown. Only a click counts toward the score."""
    try:
        existing = repo.get_cta_tracking(conversation_id)
        now = now_iso()
        if existing and existing.id is not None:
            repo.update_cta_tracking(existing.id, {
                "cta_shown_at": now,
                "cta_url": demo.cta_button_url or existing.cta_url,
                "updated_at": now,
            })
        else:
            repo.insert_cta_tracking({
                "conversation_id": conversation_id,
                "demo_id": demo.id,
                "cta_shown_at": now,
                "cta_url": demo.cta_button_url,
                "updated_at": now,
            })
        logger.info(f"Tracked CTA shown for conversation {conversation_id}")
    except Exception as e:
        logger.warning(f"Error tracking CTA shown for conversation {conversation_id}: {e}")


def record_cta_click(
    repo: Repository,
    conversation_id: str,
    demo_id: str,
    cta_url: Optional[str] = None,
    user_agent: str = "",
    ip_address: str = "",
) -> None:
    """Record a CTA click, creating the tracking row if the CTA was never logged as shown.

    Unlike the webhook handlers this raises on storage errors; the caller
    reports them to the browser.
    """
    existing = repo.get_cta_tracking(conversation_id)
    now = now_iso()
    if existing and existing.id is not None:
        repo.update_cta_tracking(existing.id, {
            "cta_clicked_at": now,
            "user_agent": user_agent,
            "ip_address": ip_address,
            "updated_at": now,
            "cta_url": cta_url or existing.cta_url,
        })
    else:
        repo.insert_cta_tracking({
            "conversation_id": conversation_id,
            "demo_id": demo_id,
            "cta_clicked_at": now,
            "user_agent": user_agent,
            "ip_address": ip_address,
            "updated_at": now,
            "cta_url": cta_url or None,
        })
    logger.info(f"Tracked CTA click for conversation {conversation_id}")


def record_video_view(repo: Repository, conversation_id: str, video_title: str) -> None:
    """Add a title the embed reports as played. Raises on storage errors."""
    _accumulate_videos(
        repo, conversation_id, [video_title], DEFAULT_VIDEO_SHOWCASE_NAME, None,
    )
    logger.info(f"Tracked video view '{video_title}' for conversation {conversation_id}")
