"""
Tests for storyforge.services.llm.key_pool and the env_list helper
"""

import pytest

from storyforge.core import FatalProviderError, env_list
from storyforge.services.llm import ApiKeyPool


class KeyRejected(Exception):
    pass


class TestEnvList:

    def test_first_non_empty_value_wins(self):
        assert env_list(None, " a, b ,,a ", "c") == ["a", "b"]

    def test_falls_back(self):
        assert env_list("", " , ", "single") == ["single"]

    def test_nothing_configured(self):
        assert env_list(None, "") == []


@pytest.mark.asyncio
class TestApiKeyPool:

    async def test_round_robin(self):
        pool = ApiKeyPool(["a", "b", "c"], provider="gemini")
        assert [pool.next_key() for _ in range(4)] == ["a", "b", "c", "a"]

    async def test_empty_pool_is_fatal(self):
        pool = ApiKeyPool(["", ""], provider="gemini")
        assert len(pool) == 0
        with pytest.raises(FatalProviderError, match="gemini"):
            pool.next_key()

    async def test_rejected_key_fails_over_once_around(self):
        pool = ApiKeyPool(["a", "b", "c"], provider="gemini")
        tried = []

        async def operation(key):
            tried.append(key)
            raise KeyRejected(key)

        with pytest.raises(KeyRejected, match="c"):
            await pool.call(operation, lambda exc: isinstance(exc, KeyRejected))
        assert tried == ["a", "b", "c"]

    async def test_other_errors_propagate_immediately(self):
        pool = ApiKeyPool(["a", "b"], provider="gemini")
        tried = []

        async def operation(key):
            tried.append(key)
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            await pool.call(operation, lambda exc: isinstance(exc, KeyRejected))
        assert tried == ["a"]

    async def test_next_call_starts_after_the_key_that_worked(self):
        pool = ApiKeyPool(["a", "b", "c"], provider="gemini")

        async def operation(key):
            if key == "a":
                raise KeyRejected(key)
            return key

        assert await pool.call(operation, lambda exc: isinstance(exc, KeyRejected)) == "b"
        assert pool.next_key() == "c"
