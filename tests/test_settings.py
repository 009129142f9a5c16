"""Tests for configuration records."""

from __future__ import annotations

import dataclasses

import pytest

from articleparser.errors import InvalidArgumentError
from articleparser.settings import (
    DEFAULT_SANITIZE_POLICY,
    DOCUMENT_SANITIZE_POLICY,
    ParseOptions,
)


class TestParseOptions:
    def test_defaults(self):
        opts = ParseOptions()
        assert opts.words_per_minute == 300
        assert opts.desc_truncate_len == 210
        assert opts.desc_len_threshold == 180
        assert opts.content_len_threshold == 200

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ParseOptions().words_per_minute = 10

    def test_zero_content_threshold_allowed(self):
        assert ParseOptions(content_len_threshold=0).content_len_threshold == 0

    def test_zero_words_per_minute_rejected(self):
        with pytest.raises(InvalidArgumentError):
            ParseOptions(words_per_minute=0)

    def test_negative_rejected(self):
        with pytest.raises(InvalidArgumentError):
            ParseOptions(desc_truncate_len=-1)

    def test_non_int_rejected(self):
        with pytest.raises(InvalidArgumentError):
            ParseOptions(words_per_minute="300")
        with pytest.raises(InvalidArgumentError):
            ParseOptions(desc_len_threshold=True)


class TestParseOptionsFromEnv:
    def test_empty_env_gives_defaults(self):
        assert ParseOptions.from_env({}) == ParseOptions()

    def test_overrides(self):
        opts = ParseOptions.from_env({
            "ARTICLEPARSER_WORDS_PER_MINUTE": "250",
            "ARTICLEPARSER_CONTENT_LEN_THRESHOLD": " 50 ",
            "UNRELATED": "1",
        })
        assert opts.words_per_minute == 250
        assert opts.content_len_threshold == 50
        assert opts.desc_truncate_len == 210

    def test_blank_value_ignored(self):
        assert ParseOptions.from_env({"ARTICLEPARSER_DESC_TRUNCATE_LEN": ""}) == ParseOptions()

    def test_garbage_raises(self):
        with pytest.raises(InvalidArgumentError):
            ParseOptions.from_env({"ARTICLEPARSER_WORDS_PER_MINUTE": "fast"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("ARTICLEPARSER_DESC_LEN_THRESHOLD", "99")
        assert ParseOptions.from_env().desc_len_threshold == 99


class TestSanitizePolicies:
    def test_default_policy_has_no_document_tags(self):
        for tag in ("html", "head", "body", "meta", "link", "title"):
            assert tag not in DEFAULT_SANITIZE_POLICY.allowed_tags

    def test_document_policy_extends_content_tags(self):
        assert DEFAULT_SANITIZE_POLICY.allowed_tags <= DOCUMENT_SANITIZE_POLICY.allowed_tags
        assert DOCUMENT_SANITIZE_POLICY.allows_attribute("meta", "property")
        assert DOCUMENT_SANITIZE_POLICY.allows_attribute("link", "rel")
        assert DOCUMENT_SANITIZE_POLICY.preserve_structured_data

    def test_allows_attribute(self):
        assert DEFAULT_SANITIZE_POLICY.allows_attribute("a", "href")
        assert not DEFAULT_SANITIZE_POLICY.allows_attribute("a", "onclick")
        assert not DEFAULT_SANITIZE_POLICY.allows_attribute("p", "class")
