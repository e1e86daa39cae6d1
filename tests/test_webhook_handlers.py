"""Tests for domo.webhook.handlers."""

from __future__ import annotations

import pytest

from domo.webhook.handlers import (
    handle_contact_info_collection,
    handle_product_interest_discovery,
    handle_video_showcase_objective,
    normalize_pain_points,
    record_cta_click,
    record_video_view,
    track_cta_shown,
    track_video_showcase,
)

EVENT = {"event_type": "application.objective_completed", "conversation_id": "c1"}


class TestNormalizePainPoints:
    @pytest.mark.parametrize("value, expected", [
        ("slow reports", ["slow reports"]),
        (["a", "b"], ["a", "b"]),
        (None, None),
        ("", None),
        ([], []),
        (42, None),
    ])
    def test_normalize(self, value, expected):
        assert normalize_pain_points(value) == expected


class TestProductInterest:
    def test_stores_string_pain_points_as_list(self, repo):
        handle_product_interest_discovery(
            repo, "c1", "product_interest_discovery",
            {"primary_interest": "Dashboards", "pain_points": "manual exports"}, EVENT,
        )
        stored = repo.get_product_interest("c1")
        assert stored.primary_interest == "Dashboards"
        assert stored.pain_points == ["manual exports"]

    def test_missing_values_stored_as_null(self, repo):
        handle_product_interest_discovery(repo, "c1", "product_interest_discovery", {}, EVENT)
        stored = repo.get_product_interest("c1")
        assert stored.primary_interest is None
        assert stored.pain_points is None

    def test_empty_pain_points_stay_a_list(self, repo):
        handle_product_interest_discovery(
            repo, "c1", "product_interest_discovery", {"pain_points": []}, EVENT,
        )
        assert repo.get_product_interest("c1").pain_points == []

    def test_keeps_raw_payload(self, repo):
        handle_product_interest_discovery(repo, "c1", "product_interest_discovery", {}, EVENT)
        raw = repo.get_raw_row("product_interest_data", "c1")
        assert raw["raw_payload"] == EVENT
        assert raw["event_type"] == "application.objective_completed"

    def test_storage_failure_is_swallowed(self, repo, monkeypatch, caplog):
        def boom(row):
            raise RuntimeError("disk full")

        monkeypatch.setattr(repo, "upsert_product_interest", boom)
        handle_product_interest_discovery(repo, "c1", "product_interest_discovery", {}, EVENT)
        assert "disk full" in caplog.text


class TestContactInfo:
    def test_stores_contact(self, repo):
        handle_contact_info_collection(
            repo, "c1", "contact_information_collection",
            {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com",
             "position": "CTO"},
            EVENT,
        )
        contact = repo.get_contact_info("c1")
        assert (contact.first_name, contact.email, contact.position) == (
            "Ada", "ada@example.com", "CTO",
        )

    def test_redelivery_updates_same_row(self, repo):
        for email in ("old@example.com", "new@example.com"):
            handle_contact_info_collection(
                repo, "c1", "greeting_and_qualification", {"email": email}, EVENT,
            )
        assert repo.get_contact_info("c1").email == "new@example.com"
        count = repo.db.conn.execute("SELECT COUNT(*) FROM qualification_data").fetchone()[0]
        assert count == 1


class TestVideoShowcase:
    def test_track_accumulates_without_duplicates(self, repo):
        track_video_showcase(repo, "c1", "Tour")
        track_video_showcase(repo, "c1", "Reports")
        track_video_showcase(repo, "c1", "Tour")
        showcase = repo.get_video_showcase("c1")
        assert showcase.videos_shown == ["Tour", "Reports"]
        assert showcase.objective_name == "video_showcase"

    def test_objective_merges_with_tracked(self, repo):
        track_video_showcase(repo, "c1", "Tour")
        handle_video_showcase_objective(
            repo, "c1", "demo_video_showcase", {"videos_shown": ["Reports", "Tour"]}, EVENT,
        )
        assert repo.get_video_showcase("c1").videos_shown == ["Tour", "Reports"]

    def test_objective_accepts_single_string(self, repo):
        handle_video_showcase_objective(
            repo, "c1", "demo_video_showcase", {"videos_shown": "Tour"}, EVENT,
        )
        assert repo.get_video_showcase("c1").videos_shown == ["Tour"]

    def test_objective_without_videos_creates_empty_row(self, repo):
        handle_video_showcase_objective(repo, "c1", "demo_video_showcase", {}, EVENT)
        showcase = repo.get_video_showcase("c1")
        assert showcase is not None
        assert showcase.videos_shown == []

    @pytest.mark.parametrize("output_variables", [["Tour"], "Tour", 7])
    def test_objective_ignores_non_object_variables(self, repo, output_variables):
        handle_video_showcase_objective(
            repo, "c1", "demo_video_showcase", output_variables, EVENT,
        )
        assert repo.get_video_showcase("c1").videos_shown == []


class TestCtaTracking:
    def test_shown_then_clicked(self, repo, demo):
        track_cta_shown(repo, "c1", demo)
        tracking = repo.get_cta_tracking("c1")
        assert tracking.cta_shown_at is not None
        assert tracking.cta_clicked_at is None
        assert tracking.cta_url == demo.cta_button_url

        record_cta_click(repo, "c1", demo.id, user_agent="pytest", ip_address="10.0.0.1")
        tracking = repo.get_cta_tracking("c1")
        assert tracking.cta_clicked_at is not None
        assert tracking.cta_shown_at is not None
        raw = repo.get_raw_row("cta_tracking", "c1")
        assert raw["user_agent"] == "pytest"
        assert raw["ip_address"] == "10.0.0.1"

    def test_click_without_shown_creates_row(self, repo, demo):
        record_cta_click(repo, "c1", demo.id, cta_url="https://acme.example.com/x")
        tracking = repo.get_cta_tracking("c1")
        assert tracking.demo_id == demo.id
        assert tracking.cta_clicked_at is not None
        assert tracking.cta_shown_at is None
        assert tracking.cta_url == "https://acme.example.com/x"

    def test_click_propagates_storage_errors(self, repo, demo, monkeypatch):
        def boom(row):
            raise RuntimeError("db down")

        monkeypatch.setattr(repo, "insert_cta_tracking", boom)
        with pytest.raises(RuntimeError):
            record_cta_click(repo, "c1", demo.id)


class TestVideoView:
    def test_records_and_merges(self, repo):
        record_video_view(repo, "c1", "Tour")
        track_video_showcase(repo, "c1", "Reports")
        record_video_view(repo, "c1", "Tour")
        showcase = repo.get_video_showcase("c1")
        assert showcase.videos_shown == ["Tour", "Reports"]
        assert showcase.objective_name == "video_showcase"

    def test_propagates_storage_errors(self, repo, monkeypatch):
        def boom(conversation_id):
            raise RuntimeError("db down")

        monkeypatch.setattr(repo, "get_video_showcase", boom)
        with pytest.raises(RuntimeError):
            record_video_view(repo, "c1", "Tour")
