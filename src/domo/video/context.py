"""Build "what is the viewer watching" messages for the conversational agent."""

from __future__ import annotations

from typing import Sequence

from domo.storage.models import VideoChapter, VideoContextInfo
from domo.video.chapters import find_chapter_at_timestamp, format_time

VIDEO_CONTEXT_MESSAGE_TYPE = "video_context_update"


def build_video_context(
    video_title: str,
    timestamp: float,
    is_paused: bool,
    chapters: Sequence[VideoChapter] = (),
) -> VideoContextInfo:
    """Snapshot the player state, resolving the current chapter."""
    return VideoContextInfo(
        current_timestamp=timestamp,
        formatted_time=format_time(timestamp),
        current_chapter=find_chapter_at_timestamp(chapters, timestamp),
        video_title=video_title,
        is_paused=is_paused,
    )


def build_video_context_description(info: VideoContextInfo) -> str:
    state = "paused" if info.is_paused else "watching"
    description = f'User is {state} "{info.video_title}" at {info.formatted_time}'
    if info.current_chapter:
        description += f'. Currently viewing: "{info.current_chapter.title}"'
    return description


def create_video_context_message(info: VideoContextInfo) -> dict:
    """Payload sent to the live agent so it knows where the viewer is."""
    chapter = info.current_chapter
    return {
        "type": VIDEO_CONTEXT_MESSAGE_TYPE,
        "video_title": info.video_title,
        "timestamp": info.current_timestamp,
        "formatted_time": info.formatted_time,
        "is_paused": info.is_paused,
        "current_chapter": (
            {"title": chapter.title, "start": chapter.start, "end": chapter.end}
            if chapter
            else None
        ),
        "description": build_video_context_description(info),
    }
