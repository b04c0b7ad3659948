"""Unit tests for invite code generation."""

import string

import pytest

from pinory.errors import GenerationExhaustedError
from pinory.friends import invite_codes
from pinory.friends.invite_codes import (
    AMBIGUOUS_CHARS,
    INVITE_CHARSET,
    INVITE_LENGTH,
    generate_invite_code,
    generate_unique_invite_code,
    normalize_invite_code,
)


class TestInviteCodes:
    def test_code_is_8_chars(self):
        assert len(generate_invite_code()) == INVITE_LENGTH == 8

    def test_charset_excludes_lookalikes(self):
        assert not set(INVITE_CHARSET) & set("0O1I")
        assert AMBIGUOUS_CHARS == frozenset("0O1I")

    def test_charset_is_uppercase_and_digits_only(self):
        assert set(INVITE_CHARSET) <= set(string.ascii_uppercase + string.digits)
        assert len(INVITE_CHARSET) == 32

    def test_codes_only_use_charset(self):
        for _ in range(200):
            assert all(c in INVITE_CHARSET for c in generate_invite_code())

    def test_codes_are_unique(self):
        codes = {generate_invite_code() for _ in range(1000)}
        assert len(codes) == 1000

    def test_normalize_uppercases(self):
        assert normalize_invite_code("abcd2345") == "ABCD2345"

    def test_normalize_strips_whitespace(self):
        assert normalize_invite_code("  abCD2345\n") == "ABCD2345"


class TestUniqueGeneration:
    @pytest.mark.asyncio
    async def test_returns_first_free_code(self, monkeypatch):
        taken = {"AAAAAAAA"}
        candidates = iter(["AAAAAAAA", "BBBBBBBB"])

        async def _exists(_db, code):
            return code in taken

        monkeypatch.setattr(invite_codes, "generate_invite_code", lambda: next(candidates))
        monkeypatch.setattr(invite_codes, "invite_code_exists", _exists)

        assert await generate_unique_invite_code(None, max_attempts=3) == "BBBBBBBB"

    @pytest.mark.asyncio
    async def test_exhausted_after_max_attempts(self, monkeypatch):
        calls = []

        async def _always_taken(_db, code):
            calls.append(code)
            return True

        monkeypatch.setattr(invite_codes, "invite_code_exists", _always_taken)

        with pytest.raises(GenerationExhaustedError):
            await generate_unique_invite_code(None, max_attempts=4)
        assert len(calls) == 4
