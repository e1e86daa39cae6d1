"""Parse video chapter listings and locate the chapter at a playback position."""

from __future__ import annotations

import logging
import math
import re
from typing import Optional, Sequence

from domo.storage.models import VideoChapter

logger = logging.getLogger(__name__)

# Section runs from the header to the next "##" header or the end of the text
CHAPTERS_SECTION = re.compile(r"## Video Chapters\s*\n(.*?)(?=\n##|\Z)", re.DOTALL)
CHAPTER_LINE = re.compile(r"^(\d+)\.\s*\[(\d+):(\d+)\s*-\s*(\d+):(\d+)\]\s*(.*)$")
# A title that is itself a chapter entry means the line had no real title
NESTED_CHAPTER = re.compile(r"^\d+\.\s*\[\d+:\d+\s*-\s*\d+:\d+\]")


def parse_chapters_from_context(text: str | None) -> list[VideoChapter]:
    """Parse the "## Video Chapters" section of a generated video context.

    Each chapter line looks like ``1. [0:00 - 1:30] Introduction``. Lines that
    don't match are skipped; a missing section yields an empty list.
    """
    if not text:
        return []

    section = CHAPTERS_SECTION.search(text)
    if not section:
        return []

    chapters = []
    for line in section.group(1).split("\n"):
        match = CHAPTER_LINE.match(line.strip())
        if not match:
            continue

        number, start_m, start_s, end_m, end_s, title = match.groups()
        title = title.strip()
        if NESTED_CHAPTER.match(title):
            title = ""

        chapters.append(
            VideoChapter(
                start=int(start_m) * 60 + int(start_s),
                end=int(end_m) * 60 + int(end_s),
                title=title or f"Chapter {int(number)}",
            )
        )

    logger.debug(f"Parsed {len(chapters)} chapters from context")
    return chapters


def format_time(seconds: float) -> str:
    """Format seconds as M:SS (minutes are not wrapped into hours)."""
    total = math.floor(seconds)
    return f"{total // 60}:{total % 60:02d}"


def find_chapter_at_timestamp(
    chapters: Sequence[VideoChapter], timestamp: float
) -> Optional[VideoChapter]:
    """Return the chapter playing at ``timestamp``.

    Ranges are inclusive on both ends and the first match wins, so a shared
    boundary belongs to the earlier chapter. Past the last chapter the last
    one is returned; in a gap, the latest chapter already started.
    """
    if not chapters:
        return None

    for chapter in chapters:
        if chapter.start <= timestamp <= chapter.end:
            return chapter

    started = [c for c in chapters if c.start <= timestamp]
    if started:
        return max(started, key=lambda c: c.start)

    return chapters[0]
