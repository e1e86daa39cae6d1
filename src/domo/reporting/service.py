"""Assemble per-conversation reports and Domo Scores for a demo."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from domo.errors import NotFoundError
from domo.scoring.domo_score import (
    MAX_SCORE,
    calculate_domo_score,
    get_score_color,
    get_score_label,
)
from domo.storage.models import (
    ContactInfo,
    ConversationDetail,
    CtaTrackingData,
    DomoScoreResult,
    ProductInterestData,
    VideoShowcaseData,
)
from domo.storage.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class ConversationReport:
    conversation: ConversationDetail
    contact: Optional[ContactInfo]
    product_interest: Optional[ProductInterestData]
    video_showcase: Optional[VideoShowcaseData]
    cta_tracking: Optional[CtaTrackingData]
    score: DomoScoreResult

    @property
    def color(self) -> str:
        return get_score_color(self.score.score)

    @property
    def label(self) -> str:
        return get_score_label(self.score.score)

    def to_dict(self) -> dict:
        return {
            "conversation_id": self.conversation.tavus_conversation_id,
            "conversation_name": self.conversation.conversation_name,
            "status": self.conversation.status,
            "started_at": self.conversation.started_at,
            "completed_at": self.conversation.completed_at,
            "contact": asdict(self.contact) if self.contact else None,
            "product_interest": asdict(self.product_interest) if self.product_interest else None,
            "video_showcase": asdict(self.video_showcase) if self.video_showcase else None,
            "cta_tracking": asdict(self.cta_tracking) if self.cta_tracking else None,
            "domo_score": {
                "score": self.score.score,
                "max_score": self.score.max_score,
                "breakdown": asdict(self.score.breakdown),
                "color": self.color,
                "label": self.label,
            },
        }


def _report(conversation, contact, interest, showcase, cta) -> ConversationReport:
    return ConversationReport(
        conversation=conversation,
        contact=contact,
        product_interest=interest,
        video_showcase=showcase,
        cta_tracking=cta,
        score=calculate_domo_score(
            contact, interest, showcase, cta, conversation.perception_analysis
        ),
    )


def build_demo_report(repo: Repository, demo_id: str) -> list[ConversationReport]:
    """Reports for every conversation of a demo, newest first."""
    if repo.get_demo(demo_id) is None:
        raise NotFoundError(f"Unknown demo: {demo_id}")

    conversations = repo.list_conversations(demo_id)
    ids = [c.tavus_conversation_id for c in conversations]
    if not ids:
        return []

    contacts = repo.get_contact_info_map(ids)
    interests = repo.get_product_interest_map(ids)
    showcases = repo.get_video_showcase_map(ids)
    ctas = repo.get_cta_tracking_map(ids)

    return [
        _report(
            c,
            contacts.get(c.tavus_conversation_id),
            interests.get(c.tavus_conversation_id),
            showcases.get(c.tavus_conversation_id),
            ctas.get(c.tavus_conversation_id),
        )
        for c in conversations
    ]


def score_conversation(
    repo: Repository, demo_id: str, conversation_id: str
) -> ConversationReport:
    conversation = repo.get_conversation(conversation_id)
    if conversation is None or conversation.demo_id != demo_id:
        raise NotFoundError(f"Unknown conversation {conversation_id} for demo {demo_id}")

    return _report(
        conversation,
        repo.get_contact_info(conversation_id),
        repo.get_product_interest(conversation_id),
        repo.get_video_showcase(conversation_id),
        repo.get_cta_tracking(conversation_id),
    )


def summarize_reports(reports: list[ConversationReport]) -> dict:
    """Aggregate figures for the dashboard header."""
    total = len(reports)
    summary = {
        "conversations": total,
        "average_score": 0.0,
        "max_score": MAX_SCORE,
        "by_label": {"Excellent": 0, "Good": 0, "Fair": 0, "Poor": 0},
        "contacts_captured": 0,
        "cta_clicks": 0,
    }
    if not total:
        return summary

    for r in reports:
        summary["by_label"][r.label] += 1
        summary["contacts_captured"] += int(r.score.breakdown.contact_confirmation)
        summary["cta_clicks"] += int(r.score.breakdown.cta_execution)

    summary["average_score"] = round(sum(r.score.score for r in reports) / total, 2)
    return summary
