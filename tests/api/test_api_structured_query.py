"""
API tests against the live Gemini service.
"""

import pytest

from gemini_structured import query_structured

HELLO = "Hello, little friend!"
WHY = "Why are you here?"


@pytest.mark.api
@pytest.mark.allow_env_pollution
class TestAPIStructuredQuery:
    """Structured queries with real API calls."""

    @pytest.mark.asyncio
    async def test_greeting_matches_one_shape(self, greeting_shapes):
        answer = await query_structured(
            "A small fox walks up to you. Greet it warmly.",
            ["You are a kind forest spirit."],
            greeting_shapes,
            timeout=120,
        )

        assert answer["answer"] in (HELLO, WHY)
        if answer["answer"] == HELLO:
            assert len(answer["remarks"]) > 0

    @pytest.mark.asyncio
    async def test_numeric_bounds_are_respected(self):
        answer = await query_structured(
            "Pick three prime numbers below 20.",
            [],
            [{"primes": "(integer >= 2)[] >= 3", "note?": "string"}],
            timeout=120,
        )

        assert len(answer["primes"]) >= 3
        assert all(isinstance(p, int) and p >= 2 for p in answer["primes"])
