"""Domo Score: a 0-5 summary of what a conversation captured.

One point each for:

1. Contact confirmation - email, first name or last name
2. Reason for visit - primary interest or pain points
3. Platform feature interest - at least one video shown
4. CTA execution - the CTA was clicked (being shown is not enough)
5. Perception analysis - the vendor produced some visual analysis

Records may be the dataclasses from ``domo.storage.models`` or plain row
dicts with the same field names.
"""

from __future__ import annotations

from typing import Any

from domo.storage.models import (
    ContactInfo,
    CtaTrackingData,
    DomoScoreBreakdown,
    DomoScoreResult,
    ProductInterestData,
    VideoShowcaseData,
)

MAX_SCORE = 5
MIN_PERCEPTION_TEXT_LENGTH = 10

# (minimum score, color, label), highest bucket first
SCORE_BUCKETS = [
    (4, "green", "Excellent"),
    (3, "blue", "Good"),
    (2, "yellow", "Fair"),
    (0, "red", "Poor"),
]


def _field(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def is_valid_perception_analysis(value: Any) -> bool:
    """True if some perception analysis output exists.

    Content is not judged: "completely black screen" counts as analysis.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return len(value.strip()) >= MIN_PERCEPTION_TEXT_LENGTH
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, dict):
        return len(value) > 0
    return False


def calculate_domo_score(
    contact: ContactInfo | dict | None = None,
    product_interest: ProductInterestData | dict | None = None,
    video_showcase: VideoShowcaseData | dict | None = None,
    cta_tracking: CtaTrackingData | dict | None = None,
    perception_analysis: Any = None,
) -> DomoScoreResult:
    pain_points = _field(product_interest, "pain_points")
    videos_shown = _field(video_showcase, "videos_shown")

    breakdown = DomoScoreBreakdown(
        contact_confirmation=contact is not None and bool(
            _field(contact, "email")
            or _field(contact, "first_name")
            or _field(contact, "last_name")
        ),
        reason_for_visit=product_interest is not None and bool(
            _field(product_interest, "primary_interest")
            or (isinstance(pain_points, list) and len(pain_points) > 0)
        ),
        platform_feature_interest=(
            video_showcase is not None
            and isinstance(videos_shown, list)
            and len(videos_shown) > 0
        ),
        cta_execution=cta_tracking is not None and bool(
            _field(cta_tracking, "cta_clicked_at")
        ),
        perception_analysis=is_valid_perception_analysis(perception_analysis),
    )

    score = sum(
        [
            breakdown.contact_confirmation,
            breakdown.reason_for_visit,
            breakdown.platform_feature_interest,
            breakdown.cta_execution,
            breakdown.perception_analysis,
        ]
    )
    return DomoScoreResult(score=score, breakdown=breakdown, max_score=MAX_SCORE)


def _bucket(score: int) -> tuple[int, str, str]:
    for bucket in SCORE_BUCKETS:
        if score >= bucket[0]:
            return bucket
    return SCORE_BUCKETS[-1]


def get_score_color(score: int) -> str:
    return _bucket(score)[1]


def get_score_label(score: int) -> str:
    return _bucket(score)[2]
