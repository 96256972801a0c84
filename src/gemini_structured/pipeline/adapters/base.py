"""Provider adapter protocol.

Adapters are the only place that talks to a provider SDK. The transport
sends an opaque request through ``generate`` and receives the raw response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from google.genai import types


@runtime_checkable
class GenerationAdapter(Protocol):
    """Minimal provider surface needed by the structured-query protocol."""

    async def generate(
        self,
        *,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> types.GenerateContentResponse:
        """Perform one remote generation call.

        Implementations must not retry; the transport owns retry policy.
        """
        ...
