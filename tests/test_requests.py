"""Tests for request payload decoding."""

from __future__ import annotations

import pytest

from metacat import InvalidArgumentError, NameIdentifier, RemoveProperty, SetComment, SetProperty
from metacat.requests import decode_changes, decode_create_request


class TestDecodeChanges:
    def test_all_variants_in_order(self):
        changes = decode_changes(
            [
                {"@type": "updateComment", "newComment": "hello"},
                {"@type": "setProperty", "property": "k", "value": "v"},
                {"@type": "removeProperty", "property": "old"},
            ]
        )
        assert changes == [SetComment("hello"), SetProperty("k", "v"), RemoveProperty("old")]

    def test_updates_envelope(self):
        changes = decode_changes({"updates": [{"@type": "removeProperty", "property": "k"}]})
        assert changes == [RemoveProperty("k")]

    def test_update_comment_without_value_clears(self):
        assert decode_changes([{"@type": "updateComment"}]) == [SetComment(None)]

    def test_empty_list(self):
        assert decode_changes([]) == []

    @pytest.mark.parametrize(
        "payload",
        [
            [{"@type": "rename", "newName": "x"}],
            [{"property": "k", "value": "v"}],
            [{"@type": "setProperty", "property": "k"}],
            [{"@type": "setProperty", "property": "", "value": "v"}],
            [{"@type": "setProperty", "property": "k", "value": 3}],
            [{"@type": "removeProperty", "property": "k", "extra": True}],
            ["setProperty"],
            "not a list",
            {"changes": []},
        ],
    )
    def test_malformed_payloads_rejected(self, payload):
        with pytest.raises(InvalidArgumentError, match="Invalid catalog change request"):
            decode_changes(payload)


class TestDecodeCreateRequest:
    def test_valid(self):
        req = decode_create_request(
            {"name": "hive", "type": "relational", "properties": {"uri": "thrift://h"}}
        )
        assert req.comment is None
        assert req.properties == {"uri": "thrift://h"}
        assert req.identifier("lake") == NameIdentifier.of("lake", "hive")

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "", "type": "relational"},
            {"name": "hive", "type": ""},
            {"name": "hive"},
            {"name": "hive", "type": "relational", "properties": {"k": 1}},
        ],
    )
    def test_invalid(self, payload):
        with pytest.raises(InvalidArgumentError, match="Invalid catalog create request"):
            decode_create_request(payload)

    def test_name_with_separator_rejected_at_identifier(self):
        req = decode_create_request({"name": "a.b", "type": "relational"})
        with pytest.raises(InvalidArgumentError):
            req.identifier("lake")
