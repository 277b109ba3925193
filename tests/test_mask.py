# tests/test_mask.py
"""Tests for object masks: matching semantics and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tiershift.mask import MaskKind, ObjectMask, compile_mask

from tests.helpers import expect_failure, expect_success, make_mask


class TestMatching:
    """Each mask kind against case-sensitive and case-insensitive keys."""

    @pytest.mark.parametrize(
        ("kind", "pattern", "key", "expected"),
        [
            (MaskKind.PREFIX, "logs/", "logs/2024/a.log", True),
            (MaskKind.PREFIX, "logs/", "archive/logs/a.log", False),
            (MaskKind.SUFFIX, ".log", "logs/2024/a.log", True),
            (MaskKind.SUFFIX, ".log", "logs/2024/a.log.gz", False),
            (MaskKind.CONTAINS, "2024", "logs/2024/a.log", True),
            (MaskKind.CONTAINS, "2025", "logs/2024/a.log", False),
            (MaskKind.REGEX, r"\d{4}/[ab]\.log$", "logs/2024/a.log", True),
            (MaskKind.REGEX, r"^2024", "logs/2024/a.log", False),
        ],
    )
    def test_kinds(self, kind: MaskKind, pattern: str, key: str, expected: bool) -> None:
        assert make_mask(pattern, kind).matches(key) is expected

    def test_regex_matches_anywhere_in_key(self) -> None:
        """Regex masks search; they are not anchored to the start of the key."""
        assert make_mask("cat", MaskKind.REGEX).matches("images/cat.jpg")

    @pytest.mark.parametrize("kind", [MaskKind.PREFIX, MaskKind.SUFFIX, MaskKind.CONTAINS])
    def test_case_flag_flips_result_when_casing_differs(self, kind: MaskKind) -> None:
        pattern = {"prefix": "IMAGES", "suffix": ".JPG", "contains": "CAT"}[kind.value]
        key = "images/cat.jpg"

        insensitive = make_mask(pattern, kind, case_sensitive=False)
        sensitive = make_mask(pattern, kind, case_sensitive=True)

        assert insensitive.matches(key)
        assert not sensitive.matches(key)

    @pytest.mark.parametrize("kind", [MaskKind.PREFIX, MaskKind.SUFFIX, MaskKind.CONTAINS])
    def test_case_flag_irrelevant_when_casing_agrees(self, kind: MaskKind) -> None:
        pattern = {"prefix": "images", "suffix": ".jpg", "contains": "cat"}[kind.value]
        key = "images/cat.jpg"

        assert make_mask(pattern, kind, case_sensitive=False).matches(key)
        assert make_mask(pattern, kind, case_sensitive=True).matches(key)

    def test_regex_case_insensitive(self) -> None:
        assert make_mask(r"\.jpg$", MaskKind.REGEX).matches("images/CAT.JPG")
        assert not make_mask(r"\.jpg$", MaskKind.REGEX, case_sensitive=True).matches(
            "images/CAT.JPG"
        )


class TestCompileMask:
    """compile_mask returns a Result instead of raising."""

    def test_valid_mask(self) -> None:
        mask = expect_success(compile_mask("jpegs", r"\.jpe?g$", MaskKind.REGEX, False))
        assert mask.name == "jpegs"
        assert mask.kind is MaskKind.REGEX

    def test_invalid_regex(self) -> None:
        error = expect_failure(compile_mask("broken", "([a-z", MaskKind.REGEX, False))
        assert error.pattern == "([a-z"
        assert error.message.startswith("Invalid regex '([a-z'")

    def test_empty_pattern(self) -> None:
        error = expect_failure(compile_mask("empty", "", MaskKind.PREFIX, False))
        assert error.message == "Mask pattern cannot be empty"

    def test_unbalanced_parenthesis_is_fine_for_non_regex_kinds(self) -> None:
        mask = expect_success(compile_mask("literal", "(", MaskKind.CONTAINS, False))
        assert mask.matches("file(1).txt")


class TestObjectMaskModel:
    """ObjectMask is a frozen pydantic model."""

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            ObjectMask.model_validate({"name": "x", "pattern": "a", "colour": "red"})

    def test_is_immutable(self) -> None:
        mask = make_mask("logs/")
        with pytest.raises(ValidationError):
            mask.pattern = "other"  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        mask = make_mask(r"^logs/\d+", MaskKind.REGEX, name="numbered", case_sensitive=True)
        assert ObjectMask.model_validate_json(mask.model_dump_json()) == mask

    def test_summary(self) -> None:
        assert make_mask("logs/", name="logs").summary() == "logs (prefix: logs/)"
        assert (
            make_mask(".gz", MaskKind.SUFFIX, name="gz", case_sensitive=True).summary()
            == "gz (suffix: .gz, case-sensitive)"
        )


class TestMaskKind:
    def test_cycle_forward_wraps(self) -> None:
        assert MaskKind.PREFIX.next() is MaskKind.SUFFIX
        assert MaskKind.REGEX.next() is MaskKind.PREFIX

    def test_cycle_backward_wraps(self) -> None:
        assert MaskKind.PREFIX.previous() is MaskKind.REGEX
        assert MaskKind.CONTAINS.previous() is MaskKind.SUFFIX
