"""Data models for Domo."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class VideoChapter:
    start: int  # seconds
    end: int  # seconds
    title: str


@dataclass
class VideoContextInfo:
    current_timestamp: float
    formatted_time: str
    current_chapter: Optional[VideoChapter]
    video_title: str
    is_paused: bool


@dataclass
class Demo:
    id: str
    name: str
    cta_title: Optional[str] = None
    cta_message: Optional[str] = None
    cta_button_text: Optional[str] = None
    cta_button_url: Optional[str] = None
    tavus_conversation_id: Optional[str] = None


@dataclass
class DemoVideo:
    demo_id: str
    title: str
    storage_url: str
    generated_context: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ConversationDetail:
    demo_id: str
    tavus_conversation_id: str
    conversation_name: Optional[str] = None
    status: str = "active"
    transcript: Any = None
    perception_analysis: Any = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ContactInfo:
    id: Optional[int]
    conversation_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    received_at: Optional[str] = None


@dataclass
class ProductInterestData:
    id: Optional[int]
    conversation_id: str
    primary_interest: Optional[str] = None
    pain_points: Optional[list[str]] = None
    received_at: Optional[str] = None


@dataclass
class VideoShowcaseData:
    id: Optional[int]
    conversation_id: str
    videos_shown: list[str] = field(default_factory=list)
    objective_name: Optional[str] = None
    received_at: Optional[str] = None


@dataclass
class CtaTrackingData:
    id: Optional[int]
    conversation_id: str
    demo_id: Optional[str] = None
    cta_shown_at: Optional[str] = None
    cta_clicked_at: Optional[str] = None
    cta_url: Optional[str] = None


@dataclass
class DomoScoreBreakdown:
    contact_confirmation: bool = False
    reason_for_visit: bool = False
    platform_feature_interest: bool = False
    cta_execution: bool = False
    perception_analysis: bool = False


@dataclass
class DomoScoreResult:
    score: int
    breakdown: DomoScoreBreakdown
    max_score: int = 5
