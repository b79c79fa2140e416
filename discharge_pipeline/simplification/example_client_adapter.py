"""Example generation client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseGenerationClient and register the provider in SimplifierFactory.
"""

from typing import ClassVar

from discharge_pipeline.simplification.client_base import BaseGenerationClient
from discharge_pipeline.simplification.models import GenerationResponse


class ExampleGenerationClientAdapter(BaseGenerationClient):
    """Example adapter that returns a fixed simplified document.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[str] = (
        "## Overview\n"
        "Not specified in your discharge summary.\n"
        "\n"
        "## Your Medications\n"
        "Not specified in your discharge summary.\n"
        "\n"
        "## Upcoming Appointments\n"
        "Not specified in your discharge summary.\n"
        "\n"
        "## Diet & Activity\n"
        "Not specified in your discharge summary.\n"
        "\n"
        "## Warning Signs\n"
        "Not specified in your discharge summary."
    )

    def generate(
        self,
        *,
        model: str,
        temperature: float,
        max_output_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> GenerationResponse:
        _ = model, temperature, max_output_tokens, system_prompt, user_prompt
        return GenerationResponse(
            text=self.DEFAULT_RESPONSE, finish_reason="stop", tokens_used=0
        )
