"""Tests for the boundary rule table."""

import re

import pytest

from chunksmith.chunking.rules import DEFAULT_RULES, BoundaryRule, build_rules, current_rules
from chunksmith.core.config import SETTINGS

pytestmark = pytest.mark.unit

RULES = {rule.name: rule for rule in DEFAULT_RULES}


def test_rule_order():
    assert [rule.name for rule in DEFAULT_RULES] == [
        "sentence",
        "url",
        "domain",
        "numbered_list",
        "markdown_link",
    ]


class TestSentenceRule:
    rule = RULES["sentence"]

    def test_detects_unterminated_text(self):
        assert self.rule.detect("This is an incomplete sentence")
        assert not self.rule.detect("Question?")
        assert not self.rule.detect('She said "yes."')

    def test_split_after_last_terminator(self):
        assert self.rule.split("This is a complete sentence. Incomplete") == (
            "This is a complete sentence.",
            "Incomplete",
        )

    def test_list_marker_is_not_a_sentence_end(self):
        assert self.rule.split("Intro. 1. First item") == ("Intro.", "1. First item")
        assert self.rule.split("1. First item\n2. Second item") is None

    def test_nothing_safe_to_keep(self):
        assert self.rule.split("no terminator at all") is None

    def test_apply_respects_limit(self):
        current = "Done. Half a"
        assert self.rule.apply(current, "sentence here.", 100) == ("Done.", "Half a sentence here.")
        assert self.rule.apply(current, "sentence here.", 10) is None


class TestUrlAndDomainRules:
    url = RULES["url"]
    domain = RULES["domain"]

    def test_url_detects_trailing_link(self):
        assert self.url.detect("Check out https://example.com", "for more")
        assert not self.url.detect("Check out https://example.com.", "Next")
        assert not self.url.detect("No link here", "at all")

    def test_url_leaves_split_domain_to_domain_rule(self):
        assert not self.url.detect("Visit https://example.", "com/page")
        assert self.domain.detect("Visit https://example.", "com/page")

    def test_domain_moves_whole_token(self):
        assert self.domain.apply("Visit fractalsoftworks.", "com/forum", 100) == (
            "Visit",
            "fractalsoftworks.com/forum",
        )

    def test_domain_needs_known_suffix(self):
        assert not self.domain.detect("Visit fractalsoftworks.", "forum today")
        assert not self.domain.detect("Visit fractalsoftworks.", "community")

    def test_custom_suffixes(self):
        rules = {rule.name: rule for rule in build_rules(["dev"])}
        assert rules["domain"].detect("See web.", "dev/docs")
        assert not rules["domain"].detect("See web.", "com/docs")

    def test_no_suffixes_disables_domain_rule(self):
        rules = {rule.name: rule for rule in build_rules([])}
        assert not rules["domain"].detect("See web.", "com/docs")
        assert rules["url"].detect("See https://x.io/a", "com")


class TestNumberedListRule:
    rule = RULES["numbered_list"]

    def test_detects_marker_at_line_start(self):
        assert self.rule.detect("Steps:\n1. Mix\n2.")
        assert self.rule.detect("Do this first. 2.")

    def test_sentence_ending_in_number_is_not_a_marker(self):
        assert not self.rule.detect("This is sentence 1.")

    def test_split(self):
        assert self.rule.split("Steps:\n1. Mix\n2.") == ("Steps:\n1. Mix", "2.")


class TestMarkdownLinkRule:
    rule = RULES["markdown_link"]

    def test_detects_unclosed_constructs(self):
        assert self.rule.detect("Read [click")
        assert self.rule.detect("Read [the guide]")
        assert self.rule.detect("Read [the guide](https://exa")

    def test_citation_is_complete(self):
        assert not self.rule.detect("Results improved [2]")

    def test_split_moves_link_text(self):
        assert self.rule.split("Read [click") == ("Read", "[click")
        assert self.rule.split("Read [the guide](https://exa") == (
            "Read",
            "[the guide](https://exa",
        )

    def test_applies_to_last_chunk(self):
        assert not self.rule.exempt_last
        assert all(rule.exempt_last for rule in DEFAULT_RULES if rule is not self.rule)


class TestRuleTable:
    def test_unknown_severity_rejected(self):
        with pytest.raises(ValueError, match="unknown severity"):
            BoundaryRule(
                name="typo",
                end_pattern=re.compile(r"\Z"),
                split_pattern=re.compile(r"(?P<dangling>\S+)\Z"),
                severity="warn",  # type: ignore[arg-type]
            )

    def test_current_rules_follow_settings(self):
        assert [rule.name for rule in current_rules()] == [rule.name for rule in DEFAULT_RULES]

        SETTINGS.SPLIT_DOMAIN_SUFFIXES = ["dev"]
        domain = {rule.name: rule for rule in current_rules()}["domain"]

        assert domain.detect("Visit example.", "dev/docs")
        assert not domain.detect("Visit example.", "com/docs")

    def test_current_rules_reused_for_same_suffixes(self):
        assert current_rules() is current_rules()
