from discharge_pipeline.config.settings import Settings
from discharge_pipeline.processor.retry import RetryPolicy
from discharge_pipeline.simplification.client_base import BaseGenerationClient
from discharge_pipeline.simplification.example_client_adapter import (
    ExampleGenerationClientAdapter,
)
from discharge_pipeline.simplification.openai_client_adapter import (
    OpenAIGenerationClientAdapter,
)
from discharge_pipeline.simplification.simplifier import Simplifier


class SimplifierFactory:
    """Creates the configured simplifier."""

    SUPPORTED_PROVIDERS = ("example", "openai", "openai_compatible")

    @classmethod
    def create(cls, settings: Settings, retry_policy: RetryPolicy | None = None) -> Simplifier:
        """Create a configured simplifier from application settings."""
        if retry_policy is None:
            retry_policy = RetryPolicy(
                max_attempts=settings.max_retries,
                base_delay_seconds=settings.retry_delay_seconds,
            )
        provider = settings.simplification_provider.lower()
        if provider == "example":
            return Simplifier(
                client=ExampleGenerationClientAdapter(),
                model="example",
                retry_policy=retry_policy,
            )
        return Simplifier(
            client=cls._create_client(provider, settings),
            model=settings.simplification_openai_model_name,
            retry_policy=retry_policy,
            temperature=settings.simplification_temperature,
            max_output_tokens=settings.simplification_max_output_tokens,
        )

    @classmethod
    def _create_client(cls, provider: str, settings: Settings) -> BaseGenerationClient:
        if provider == "openai":
            base_url = None
        elif provider == "openai_compatible":
            base_url = settings.simplification_openai_compatible_base_url.strip()
            if not base_url:
                raise ValueError(
                    "simplification_openai_compatible_base_url is required for "
                    "simplification_provider=openai_compatible"
                )
        else:
            raise ValueError(
                f"Unknown simplification provider '{provider}'. "
                f"Choose from: {list(cls.SUPPORTED_PROVIDERS)}"
            )
        return OpenAIGenerationClientAdapter(
            api_key=settings.simplification_openai_api_key,
            timeout_seconds=settings.simplification_openai_timeout_seconds,
            base_url=base_url,
        )
