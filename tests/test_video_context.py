"""Tests for domo.video.context."""

from __future__ import annotations

from domo.storage.models import VideoChapter
from domo.video.context import (
    VIDEO_CONTEXT_MESSAGE_TYPE,
    build_video_context,
    build_video_context_description,
    create_video_context_message,
)

CHAPTERS = [
    VideoChapter(start=0, end=45, title="Welcome"),
    VideoChapter(start=45, end=130, title="Dashboard overview"),
]


class TestBuildVideoContext:
    def test_resolves_chapter(self):
        info = build_video_context("Product Tour", 90.5, False, CHAPTERS)
        assert info.formatted_time == "1:30"
        assert info.current_chapter.title == "Dashboard overview"
        assert info.current_timestamp == 90.5

    def test_no_chapters(self):
        info = build_video_context("Product Tour", 12, True)
        assert info.current_chapter is None


class TestDescription:
    def test_watching_with_chapter(self):
        info = build_video_context("Product Tour", 10, False, CHAPTERS)
        assert build_video_context_description(info) == (
            'User is watching "Product Tour" at 0:10. Currently viewing: "Welcome"'
        )

    def test_paused_without_chapter(self):
        info = build_video_context("Product Tour", 75, True)
        assert build_video_context_description(info) == 'User is paused "Product Tour" at 1:15'


class TestMessage:
    def test_message_shape(self):
        info = build_video_context("Product Tour", 50, True, CHAPTERS)
        message = create_video_context_message(info)
        assert message["type"] == VIDEO_CONTEXT_MESSAGE_TYPE
        assert message["video_title"] == "Product Tour"
        assert message["is_paused"] is True
        assert message["current_chapter"] == {
            "title": "Dashboard overview", "start": 45, "end": 130,
        }
        assert "Dashboard overview" in message["description"]

    def test_message_without_chapter(self):
        message = create_video_context_message(build_video_context("Clip", 3, False))
        assert message["current_chapter"] is None
