"""Tests for domo.video.chapters."""

from __future__ import annotations

import pytest

from domo.storage.models import VideoChapter
from domo.video.chapters import (
    find_chapter_at_timestamp,
    format_time,
    parse_chapters_from_context,
)


class TestParseChapters:
    def test_parses_section(self, sample_context):
        chapters = parse_chapters_from_context(sample_context)
        assert [(c.start, c.end) for c in chapters] == [
            (0, 45), (45, 130), (130, 210), (225, 300),
        ]
        assert chapters[0].title == "Welcome"
        assert chapters[1].title == "Dashboard overview"

    def test_missing_title_falls_back_to_number(self, sample_context):
        chapters = parse_chapters_from_context(sample_context)
        assert chapters[2].title == "Chapter 3"

    def test_stops_at_next_section(self, sample_context):
        titles = [c.title for c in parse_chapters_from_context(sample_context)]
        assert "Not a chapter" not in titles

    @pytest.mark.parametrize("text", [None, "", "# Just a heading\n\nNo chapters here."])
    def test_no_section(self, text):
        assert parse_chapters_from_context(text) == []

    def test_skips_malformed_lines(self):
        text = (
            "## Video Chapters\n"
            "1. [0:00 - 0:30] Intro\n"
            "- a bullet\n"
            "2. 0:30 - 1:00 No brackets\n"
            "3. [1:00 - 2:00] Wrap up\n"
        )
        assert [c.title for c in parse_chapters_from_context(text)] == ["Intro", "Wrap up"]

    def test_section_at_end_of_text(self):
        text = "## Video Chapters\n1. [0:00 - 1:00] Only one"
        chapters = parse_chapters_from_context(text)
        assert chapters == [VideoChapter(start=0, end=60, title="Only one")]

    def test_title_that_is_another_entry(self):
        text = "## Video Chapters\n1. [0:00 - 1:00] 2. [1:00 - 2:00]\n"
        assert parse_chapters_from_context(text)[0].title == "Chapter 1"


class TestFormatTime:
    @pytest.mark.parametrize("seconds, expected", [
        (0, "0:00"),
        (5, "0:05"),
        (59.9, "0:59"),
        (60, "1:00"),
        (125.4, "2:05"),
        (3725, "62:05"),
    ])
    def test_format(self, seconds, expected):
        assert format_time(seconds) == expected


class TestFindChapter:
    @pytest.fixture
    def chapters(self, sample_context):
        return parse_chapters_from_context(sample_context)

    def test_inside_range(self, chapters):
        assert find_chapter_at_timestamp(chapters, 60).title == "Dashboard overview"

    def test_shared_boundary_goes_to_earlier(self, chapters):
        assert find_chapter_at_timestamp(chapters, 45).title == "Welcome"

    def test_gap_uses_latest_started(self, chapters):
        assert find_chapter_at_timestamp(chapters, 215).title == "Chapter 3"

    def test_past_end_uses_last(self, chapters):
        assert find_chapter_at_timestamp(chapters, 999).title == "Reporting"

    def test_before_first_uses_first(self):
        chapters = [VideoChapter(start=10, end=20, title="Late start")]
        assert find_chapter_at_timestamp(chapters, 3).title == "Late start"

    def test_empty(self):
        assert find_chapter_at_timestamp([], 10) is None


class TestLocatorTable:
    CHAPTERS = [
        VideoChapter(start=0, end=60, title="A"),
        VideoChapter(start=60, end=120, title="B"),
        VideoChapter(start=120, end=180, title="C"),
    ]

    @pytest.mark.parametrize("timestamp, title", [
        (0, "A"), (30, "A"), (60, "A"), (61, "B"), (120, "B"), (121, "C"), (200, "C"),
    ])
    def test_timestamps(self, timestamp, title):
        assert find_chapter_at_timestamp(self.CHAPTERS, timestamp).title == title


class TestFormatTimeRoundTrip:
    def test_every_second_in_an_hour(self):
        for seconds in range(0, 3600):
            minutes, secs = format_time(seconds).split(":")
            assert len(secs) == 2
            assert int(minutes) * 60 + int(secs) == seconds
