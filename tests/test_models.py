"""Tests for the lenient export models in models.py."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from models import (
    CanvasMetadata,
    ConversationRecord,
    Message,
    MessageMetadata,
    parse_conversations,
    to_local_datetime,
)


# ── to_local_datetime ──────────────────────────


class TestToLocalDatetime:
    def test_valid_timestamp(self):
        ts = datetime(2024, 1, 15, 8, 30).timestamp()
        assert to_local_datetime(ts) == datetime(2024, 1, 15, 8, 30)

    def test_integer_timestamp(self):
        assert to_local_datetime(1_700_000_000) == datetime.fromtimestamp(1_700_000_000)

    @pytest.mark.parametrize(
        "value", [None, True, False, "abc", float("nan"), 1e20, -1e20, [], {}]
    )
    def test_rejected_values(self, value):
        assert to_local_datetime(value) is None


# ── Lenient validation ─────────────────────────


class TestLenientValidation:
    def test_wrong_type_falls_back_to_default(self):
        message = Message.model_validate(
            {
                "author": "not an object",
                "create_time": "yesterday",
                "content": {"parts": "not a list"},
                "metadata": None,
            }
        )
        assert message.role is None
        assert message.create_time is None
        assert message.parts == []
        assert message.metadata.model_slug is None

    @pytest.mark.parametrize("value", [True, False, "1700000000", "1.5e9"])
    def test_non_numeric_timestamps_dropped(self, value):
        message = Message.model_validate({"create_time": value, "update_time": value})
        record = ConversationRecord.model_validate({"create_time": value, "update_time": value})
        assert message.create_time is None
        assert message.update_time is None
        assert record.create_time is None
        assert record.update_time is None

    @pytest.mark.parametrize("value", [1_700_000_000, 1_700_000_000.25])
    def test_numeric_timestamps_kept(self, value):
        assert Message.model_validate({"create_time": value}).create_time == value
        assert ConversationRecord.model_validate({"update_time": value}).update_time == value

    def test_non_object_mapping_entries_dropped(self):
        record = ConversationRecord.model_validate(
            {"mapping": {"a": "junk", "b": None, "c": {"message": None}}}
        )
        assert list(record.mapping) == ["c"]

    def test_mapping_not_a_dict(self):
        record = ConversationRecord.model_validate({"mapping": ["a", "b"]})
        assert record.mapping == {}

    def test_unknown_keys_kept(self):
        record = ConversationRecord.model_validate({"title": "t", "safe_urls": ["x"]})
        assert record.model_extra == {"safe_urls": ["x"]}

    def test_unknown_metadata_keys_kept(self):
        metadata = MessageMetadata.model_validate({"parent_id": "p1", "model_slug": "gpt-4o"})
        assert metadata.model_slug == "gpt-4o"
        assert metadata.model_extra == {"parent_id": "p1"}

    def test_records_are_frozen(self):
        record = ConversationRecord.model_validate({"title": "t"})
        with pytest.raises(Exception):
            record.title = "changed"

    def test_cite_metadata_alias(self):
        metadata = MessageMetadata.model_validate(
            {"_cite_metadata": {"metadata_list": [{"type": "webpage"}, "junk"]}}
        )
        assert [c.type for c in metadata.cite_metadata.metadata_list] == ["webpage"]

    def test_attachments_non_objects_dropped(self):
        metadata = MessageMetadata.model_validate(
            {"attachments": [{"mime_type": "image/png"}, 7, "x"]}
        )
        assert [a.mime_type for a in metadata.attachments] == ["image/png"]

    def test_default_model_slug_presence_tracked(self):
        assert "default_model_slug" in MessageMetadata.model_validate(
            {"default_model_slug": "auto"}
        ).model_fields_set
        assert "default_model_slug" not in MessageMetadata.model_validate({}).model_fields_set


# ── Message helpers ────────────────────────────


class TestMessage:
    def test_text_joins_string_parts(self):
        message = Message.model_validate(
            {"content": {"parts": ["hello", {"asset": "img"}, "world"]}}
        )
        assert message.text == "hello world"

    def test_role(self):
        assert Message.model_validate({"author": {"role": "tool"}}).role == "tool"


class TestCanvasMetadata:
    def test_code_language(self):
        assert CanvasMetadata(textdoc_type="code/python").code_language == "python"

    def test_document_has_no_language(self):
        assert CanvasMetadata(textdoc_type="document").code_language is None

    def test_empty_language_is_code(self):
        canvas = CanvasMetadata(textdoc_type="code/")
        assert canvas.is_code
        assert canvas.code_language is None
        assert not CanvasMetadata(textdoc_type="document").is_code
        assert not CanvasMetadata().is_code

    def test_accelerator_fields(self):
        canvas = CanvasMetadata.model_validate(
            {"accelerator_metadata": {"id": "emoji", "prompt": "Remove emojis"}}
        )
        assert canvas.accelerator_id == "emoji"
        assert canvas.accelerator_prompt == "Remove emojis"

    def test_missing_accelerator(self):
        canvas = CanvasMetadata()
        assert canvas.accelerator_id is None
        assert canvas.accelerator_prompt is None


# ── ConversationRecord ─────────────────────────


class TestConversationRecord:
    def test_custom_agent_by_template(self):
        assert ConversationRecord(conversation_template_id="g-123").is_custom_agent

    def test_custom_agent_by_gizmo(self):
        assert ConversationRecord(gizmo_id="g-123").is_custom_agent

    def test_not_custom_agent(self):
        assert not ConversationRecord(gizmo_id="gizmo-123").is_custom_agent

    def test_iter_messages_skips_structural_nodes(self):
        record = ConversationRecord.model_validate(
            {
                "mapping": {
                    "root": {"message": None, "children": ["m1"]},
                    "m1": {"message": {"author": {"role": "user"}}},
                }
            }
        )
        assert [m.role for _, m in record.iter_messages()] == ["user"]

    def test_first_child_message(self):
        record = ConversationRecord.model_validate(
            {
                "mapping": {
                    "m1": {"message": {"author": {"role": "user"}}, "children": ["m2", "m3"]},
                    "m2": {"message": {"author": {"role": "assistant"}}},
                    "m3": {"message": {"author": {"role": "tool"}}},
                }
            }
        )
        node = record.mapping["m1"]
        assert record.first_child_message(node).role == "assistant"

    def test_first_child_missing(self):
        record = ConversationRecord.model_validate(
            {"mapping": {"m1": {"message": {}, "children": ["gone"]}}}
        )
        assert record.first_child_message(record.mapping["m1"]) is None


class TestParseConversations:
    def test_drops_non_objects(self, caplog):
        with caplog.at_level(logging.WARNING):
            records = parse_conversations([{"title": "a"}, "b", 3])
        assert [r.title for r in records] == ["a"]
        assert "Skipped 2" in caplog.text

    def test_passes_records_through(self):
        record = ConversationRecord(title="a")
        assert parse_conversations([record]) == [record]
