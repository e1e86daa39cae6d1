"""Classify vendor webhook events and pull tool calls out of them."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from domo.config import (
    CONVERSATION_ENDED_EVENTS,
    KNOWN_TOOLS,
    OBJECTIVE_COMPLETED_EVENTS,
)

logger = logging.getLogger(__name__)

TITLE_KEYS = ("title", "video_title", "videoName", "video_name")
QUOTED_ARG = re.compile(r"""^["'](.+?)["']$""")
KEYED_TITLE_ARG = re.compile(
    r"""(?:title|video_title|videoName|video_name)\s*[:=]\s*["'](.+?)["']""",
    re.IGNORECASE,
)

# Short names and spoken aliases the agent sometimes uses for control tools
TOOL_ALIASES = {
    "pause_video": {"pause", "pause_video", "hold", "hold on", "pause video", "pause the video"},
    "play_video": {
        "resume", "play", "play_video", "continue", "unpause", "start",
        "start video", "resume video", "play video", "play the video",
    },
    "next_video": {"next", "next_video", "skip", "skip video", "next video"},
    "close_video": {
        "close", "close_video", "exit", "stop", "stop video", "end video",
        "hide video", "close video", "close the video",
    },
}


@dataclass
class ToolCall:
    name: Optional[str] = None
    args: Any = None


def event_type_of(event: dict) -> str:
    data = event.get("data") if isinstance(event.get("data"), dict) else {}
    return event.get("event_type") or event.get("type") or data.get("event_type") or ""


def is_objective_completion(event: dict) -> bool:
    return event_type_of(event) in OBJECTIVE_COMPLETED_EVENTS


def is_conversation_ended(event: dict) -> bool:
    return event_type_of(event) in CONVERSATION_ENDED_EVENTS


def _nested(event: dict, key: str) -> Any:
    """Look up ``key`` under properties, then data, then the top level."""
    for container in (event.get("properties"), event.get("data")):
        if isinstance(container, dict) and container.get(key) is not None:
            return container[key]
    return event.get(key)


def objective_name_of(event: dict) -> Optional[str]:
    return _nested(event, "objective_name")


def output_variables_of(event: dict) -> dict:
    variables = _nested(event, "output_variables")
    return variables if isinstance(variables, dict) else {}


def canonical_tool_name(name: Any) -> Optional[str]:
    """Map a short or spoken tool name to its canonical tool."""
    if not isinstance(name, str):
        return None
    normalized = name.strip().lower()
    for tool, aliases in TOOL_ALIASES.items():
        if normalized in aliases:
            return tool
    return None


def _parse_args(raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        parsed = json.loads(raw)
    except ValueError:
        text = raw.strip()
        quoted = QUOTED_ARG.match(text)
        if quoted:
            return {"title": quoted.group(1)}
        keyed = KEYED_TITLE_ARG.search(text)
        if keyed:
            return {"title": keyed.group(1)}
        return {"title": text}

    if isinstance(parsed, str):
        return {"title": parsed.strip("\"'")}
    if isinstance(parsed, dict):
        return parsed
    return None


def _first_present(event: dict, paths: list[tuple[str, ...]]) -> Any:
    for path in paths:
        value: Any = event
        for key in path:
            value = value.get(key) if isinstance(value, dict) else None
        if value is not None:
            return value
    return None


def parse_tool_call_from_event(event: Any) -> ToolCall:
    """Extract the tool name and arguments from a tool-call event.

    Non tool-call events return an empty ToolCall.
    """
    if not isinstance(event, dict):
        return ToolCall()

    normalized_type = re.sub(r"[.\-]", "_", event_type_of(event).lower())
    if "tool_call" not in normalized_type and not normalized_type.endswith("toolcall"):
        return ToolCall()

    name = _first_present(event, [
        ("data", "name"), ("data", "function", "name"), ("name",),
        ("function", "name"), ("properties", "name"), ("properties", "function", "name"),
    ])
    raw_args = _first_present(event, [
        ("data", "args"), ("data", "arguments"), ("data", "function", "arguments"),
        ("args",), ("arguments",), ("function", "arguments"),
        ("properties", "args"), ("properties", "arguments"),
        ("properties", "function", "arguments"),
    ])
    args = _parse_args(raw_args)

    if isinstance(name, str) and name not in KNOWN_TOOLS:
        canonical = canonical_tool_name(name)
        if canonical:
            return ToolCall(name=canonical, args={})

    # fetch_video("pause") is really a control command
    if name == "fetch_video":
        control = canonical_tool_name(extract_video_title(args))
        if control:
            return ToolCall(name=control, args={})

    return ToolCall(name=name, args=args)


def extract_video_title(args: Any) -> str:
    """Pull a video title out of tool-call arguments; empty string if none."""
    candidate = None
    if isinstance(args, str):
        candidate = args
    elif isinstance(args, dict):
        for key in TITLE_KEYS:
            if args.get(key):
                candidate = args[key]
                break
    if not isinstance(candidate, str):
        return ""
    return candidate.strip().strip("\"'")
