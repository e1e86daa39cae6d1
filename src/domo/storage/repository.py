"""CRUD operations for the Domo database."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from domo.storage.database import Database
from domo.storage.models import (
    ContactInfo,
    ConversationDetail,
    CtaTrackingData,
    Demo,
    DemoVideo,
    ProductInterestData,
    VideoShowcaseData,
)

# Writable columns per concern table. Anything else is rejected.
QUALIFICATION_COLUMNS = (
    "conversation_id", "first_name", "last_name", "email", "position",
    "objective_name", "event_type", "raw_payload", "received_at",
)
PRODUCT_INTEREST_COLUMNS = (
    "conversation_id", "objective_name", "primary_interest", "pain_points",
    "event_type", "raw_payload", "received_at",
)
VIDEO_SHOWCASE_COLUMNS = (
    "conversation_id", "objective_name", "videos_shown", "event_type",
    "received_at",
)
CTA_TRACKING_COLUMNS = (
    "conversation_id", "demo_id", "cta_shown_at", "cta_clicked_at", "cta_url",
    "user_agent", "ip_address", "updated_at",
)

JSON_COLUMNS = {"raw_payload", "pain_points", "videos_shown", "transcript", "perception_analysis"}


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and value is not None:
        return json.dumps(value)
    return value


def _decode(value: str | None) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


def _check_columns(table: str, row: dict, allowed: tuple[str, ...]):
    unknown = set(row) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown columns for {table}: {sorted(unknown)}")


class Repository:
    """Database operations for Domo."""

    def __init__(self, db: Database):
        self.db = db

    # ── Demos ──────────────────────────────────────────────────────

    def create_demo(
        self,
        name: str,
        cta_title: str | None = None,
        cta_message: str | None = None,
        cta_button_text: str | None = None,
        cta_button_url: str | None = None,
        demo_id: str | None = None,
    ) -> Demo:
        demo = Demo(
            id=demo_id or str(uuid.uuid4()),
            name=name,
            cta_title=cta_title,
            cta_message=cta_message,
            cta_button_text=cta_button_text,
            cta_button_url=cta_button_url,
        )
        self.db.conn.execute(
            """INSERT INTO demos
               (id, name, cta_title, cta_message, cta_button_text, cta_button_url)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                demo.id,
                demo.name,
                demo.cta_title,
                demo.cta_message,
                demo.cta_button_text,
                demo.cta_button_url,
            ),
        )
        self.db.conn.commit()
        return demo

    def get_demo(self, demo_id: str) -> Demo | None:
        row = self.db.conn.execute(
            "SELECT * FROM demos WHERE id = ?", (demo_id,)
        ).fetchone()
        return _demo_from_row(row) if row else None

    def list_demos(self) -> list[Demo]:
        rows = self.db.conn.execute(
            "SELECT * FROM demos ORDER BY created_at, name"
        ).fetchall()
        return [_demo_from_row(r) for r in rows]

    def set_demo_conversation(self, demo_id: str, conversation_id: str):
        """Point a demo at its currently active conversation."""
        self.db.conn.execute(
            "UPDATE demos SET tavus_conversation_id = ? WHERE id = ?",
            (conversation_id, demo_id),
        )
        self.db.conn.commit()

    def get_demo_for_conversation(self, conversation_id: str) -> Demo | None:
        """Find the demo that owns a conversation.

        Checks the demo's active conversation first, then past conversations.
        """
        row = self.db.conn.execute(
            "SELECT * FROM demos WHERE tavus_conversation_id = ?",
            (conversation_id,),
        ).fetchone()
        if row is None:
            row = self.db.conn.execute(
                """SELECT d.* FROM demos d
                   JOIN conversation_details c ON c.demo_id = d.id
                   WHERE c.tavus_conversation_id = ?""",
                (conversation_id,),
            ).fetchone()
        return _demo_from_row(row) if row else None

    # ── Demo Videos ────────────────────────────────────────────────

    def add_demo_video(self, video: DemoVideo) -> int:
        cursor = self.db.conn.execute(
            """INSERT INTO demo_videos
               (demo_id, title, storage_url, generated_context)
               VALUES (?, ?, ?, ?)""",
            (video.demo_id, video.title, video.storage_url, video.generated_context),
        )
        self.db.conn.commit()
        return cursor.lastrowid

    def get_demo_video(self, demo_id: str, title: str) -> DemoVideo | None:
        row = self.db.conn.execute(
            "SELECT * FROM demo_videos WHERE demo_id = ? AND title = ?",
            (demo_id, title),
        ).fetchone()
        return _video_from_row(row) if row else None

    def list_demo_videos(self, demo_id: str) -> list[DemoVideo]:
        rows = self.db.conn.execute(
            "SELECT * FROM demo_videos WHERE demo_id = ? ORDER BY id",
            (demo_id,),
        ).fetchall()
        return [_video_from_row(r) for r in rows]

    # ── Conversations ──────────────────────────────────────────────

    def insert_conversation(self, detail: ConversationDetail) -> int:
        cursor = self.db.conn.execute(
            """INSERT INTO conversation_details
               (demo_id, tavus_conversation_id, conversation_name, status,
                started_at)
               VALUES (?, ?, ?, ?, ?)""",
            (
                detail.demo_id,
                detail.tavus_conversation_id,
                detail.conversation_name,
                detail.status,
                detail.started_at or now_iso(),
            ),
        )
        self.db.conn.commit()
        return cursor.lastrowid

    def get_conversation(self, conversation_id: str) -> ConversationDetail | None:
        row = self.db.conn.execute(
            "SELECT * FROM conversation_details WHERE tavus_conversation_id = ?",
            (conversation_id,),
        ).fetchone()
        return _conversation_from_row(row) if row else None

    def list_conversations(self, demo_id: str) -> list[ConversationDetail]:
        rows = self.db.conn.execute(
            """SELECT * FROM conversation_details
               WHERE demo_id = ? ORDER BY started_at DESC""",
            (demo_id,),
        ).fetchall()
        return [_conversation_from_row(r) for r in rows]

    def mark_conversation_ended(self, conversation_id: str) -> bool:
        cursor = self.db.conn.execute(
            """UPDATE conversation_details
               SET status = 'ended', completed_at = ?
               WHERE tavus_conversation_id = ?""",
            (now_iso(), conversation_id),
        )
        self.db.conn.commit()
        return cursor.rowcount > 0

    def update_conversation_analysis(
        self,
        conversation_id: str,
        transcript: Any = None,
        perception_analysis: Any = None,
    ) -> bool:
        """Store a transcript and/or perception analysis. None leaves a field alone."""
        updates = {}
        if transcript is not None:
            updates["transcript"] = transcript
        if perception_analysis is not None:
            updates["perception_analysis"] = perception_analysis
        if not updates:
            return False

        assignments = ", ".join(f"{col} = ?" for col in updates)
        values = [_encode(col, val) for col, val in updates.items()]
        cursor = self.db.conn.execute(
            f"UPDATE conversation_details SET {assignments} WHERE tavus_conversation_id = ?",
            (*values, conversation_id),
        )
        self.db.conn.commit()
        return cursor.rowcount > 0

    # ── Domo Score Concerns ────────────────────────────────────────

    def upsert_qualification(self, row: dict) -> None:
        self._upsert("qualification_data", QUALIFICATION_COLUMNS, row)

    def upsert_product_interest(self, row: dict) -> None:
        self._upsert("product_interest_data", PRODUCT_INTEREST_COLUMNS, row)

    def get_contact_info(self, conversation_id: str) -> ContactInfo | None:
        row = self._get_by_conversation("qualification_data", conversation_id)
        return _contact_from_row(row) if row else None

    def get_product_interest(self, conversation_id: str) -> ProductInterestData | None:
        row = self._get_by_conversation("product_interest_data", conversation_id)
        return _interest_from_row(row) if row else None

    def get_video_showcase(self, conversation_id: str) -> VideoShowcaseData | None:
        row = self._get_by_conversation("video_showcase_data", conversation_id)
        return _showcase_from_row(row) if row else None

    def insert_video_showcase(self, row: dict) -> int:
        return self._insert("video_showcase_data", VIDEO_SHOWCASE_COLUMNS, row)

    def update_video_showcase(self, showcase_id: int, fields: dict) -> None:
        self._update("video_showcase_data", VIDEO_SHOWCASE_COLUMNS, showcase_id, fields)

    def get_cta_tracking(self, conversation_id: str) -> CtaTrackingData | None:
        row = self._get_by_conversation("cta_tracking", conversation_id)
        return _cta_from_row(row) if row else None

    def insert_cta_tracking(self, row: dict) -> int:
        return self._insert("cta_tracking", CTA_TRACKING_COLUMNS, row)

    def update_cta_tracking(self, tracking_id: int, fields: dict) -> None:
        self._update("cta_tracking", CTA_TRACKING_COLUMNS, tracking_id, fields)

    def get_raw_row(self, table: str, conversation_id: str) -> dict | None:
        """Return a concern row as stored, with JSON columns decoded."""
        row = self._get_by_conversation(table, conversation_id)
        if row is None:
            return None
        data = dict(row)
        for col in JSON_COLUMNS & set(data):
            data[col] = _decode(data[col])
        return data

    # ── Reporting Lookups ──────────────────────────────────────────

    def get_contact_info_map(self, conversation_ids: Iterable[str]) -> dict[str, ContactInfo]:
        return self._map_by_conversation("qualification_data", conversation_ids, _contact_from_row)

    def get_product_interest_map(self, conversation_ids: Iterable[str]) -> dict[str, ProductInterestData]:
        return self._map_by_conversation("product_interest_data", conversation_ids, _interest_from_row)

    def get_video_showcase_map(self, conversation_ids: Iterable[str]) -> dict[str, VideoShowcaseData]:
        return self._map_by_conversation("video_showcase_data", conversation_ids, _showcase_from_row)

    def get_cta_tracking_map(self, conversation_ids: Iterable[str]) -> dict[str, CtaTrackingData]:
        return self._map_by_conversation("cta_tracking", conversation_ids, _cta_from_row)

    # ── Webhook Idempotency ────────────────────────────────────────

    def record_webhook_event(
        self, event_hash: str, conversation_id: str | None, event_type: str | None
    ) -> bool:
        """Record a delivery. Returns False if it was already recorded."""
        cursor = self.db.conn.execute(
            """INSERT OR IGNORE INTO webhook_events
               (event_hash, conversation_id, event_type)
               VALUES (?, ?, ?)""",
            (event_hash, conversation_id, event_type),
        )
        self.db.conn.commit()
        return cursor.rowcount > 0

    # ── Helpers ────────────────────────────────────────────────────

    def _get_by_conversation(self, table: str, conversation_id: str):
        return self.db.conn.execute(
            f"SELECT * FROM {table} WHERE conversation_id = ?",
            (conversation_id,),
        ).fetchone()

    def _map_by_conversation(self, table: str, conversation_ids: Iterable[str], convert) -> dict:
        ids = list(conversation_ids)
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        rows = self.db.conn.execute(
            f"SELECT * FROM {table} WHERE conversation_id IN ({placeholders})",
            ids,
        ).fetchall()
        return {r["conversation_id"]: convert(r) for r in rows}

    def _insert(self, table: str, allowed: tuple[str, ...], row: dict) -> int:
        _check_columns(table, row, allowed)
        columns = list(row)
        cursor = self.db.conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            [_encode(c, row[c]) for c in columns],
        )
        self.db.conn.commit()
        return cursor.lastrowid

    def _update(self, table: str, allowed: tuple[str, ...], row_id: int, fields: dict):
        _check_columns(table, fields, allowed)
        if not fields:
            return
        assignments = ", ".join(f"{col} = ?" for col in fields)
        self.db.conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*[_encode(c, v) for c, v in fields.items()], row_id),
        )
        self.db.conn.commit()

    def _upsert(self, table: str, allowed: tuple[str, ...], row: dict):
        _check_columns(table, row, allowed)
        columns = list(row)
        updates = ", ".join(
            f"{c} = excluded.{c}" for c in columns if c != "conversation_id"
        )
        self.db.conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)}) "
            f"ON CONFLICT(conversation_id) DO UPDATE SET {updates}",
            [_encode(c, row[c]) for c in columns],
        )
        self.db.conn.commit()


# ── Row Conversion ─────────────────────────────────────────────────


def _demo_from_row(row) -> Demo:
    return Demo(
        id=row["id"],
        name=row["name"],
        cta_title=row["cta_title"],
        cta_message=row["cta_message"],
        cta_button_text=row["cta_button_text"],
        cta_button_url=row["cta_button_url"],
        tavus_conversation_id=row["tavus_conversation_id"],
    )


def _video_from_row(row) -> DemoVideo:
    return DemoVideo(
        id=row["id"],
        demo_id=row["demo_id"],
        title=row["title"],
        storage_url=row["storage_url"],
        generated_context=row["generated_context"],
    )


def _conversation_from_row(row) -> ConversationDetail:
    return ConversationDetail(
        id=row["id"],
        demo_id=row["demo_id"],
        tavus_conversation_id=row["tavus_conversation_id"],
        conversation_name=row["conversation_name"],
        status=row["status"],
        transcript=_decode(row["transcript"]),
        perception_analysis=_decode(row["perception_analysis"]),
        started_at=row["started_at"],
        completed_at=row["completed_at"],
    )


def _contact_from_row(row) -> ContactInfo:
    return ContactInfo(
        id=row["id"],
        conversation_id=row["conversation_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        position=row["position"],
        received_at=row["received_at"],
    )


def _interest_from_row(row) -> ProductInterestData:
    return ProductInterestData(
        id=row["id"],
        conversation_id=row["conversation_id"],
        primary_interest=row["primary_interest"],
        pain_points=_decode(row["pain_points"]),
        received_at=row["received_at"],
    )


def _showcase_from_row(row) -> VideoShowcaseData:
    return VideoShowcaseData(
        id=row["id"],
        conversation_id=row["conversation_id"],
        videos_shown=_decode(row["videos_shown"]) or [],
        objective_name=row["objective_name"],
        received_at=row["received_at"],
    )


def _cta_from_row(row) -> CtaTrackingData:
    return CtaTrackingData(
        id=row["id"],
        conversation_id=row["conversation_id"],
        demo_id=row["demo_id"],
        cta_shown_at=row["cta_shown_at"],
        cta_clicked_at=row["cta_clicked_at"],
        cta_url=row["cta_url"],
    )
