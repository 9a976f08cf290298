"""Configuration helpers for API keys and environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(slots=True)
class ApiSettings:
    """Centralised container for credentials and generation limits."""

    google_maps_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    xai_api_key: Optional[str] = None
    llm_provider: Literal["xai", "openai"] = "xai"
    llm_model: Optional[str] = None
    max_tool_round_trips: int = 12
    generation_timeout_s: float = 120.0
    places_timeout_s: float = 10.0

    @classmethod
    def from_env(cls) -> "ApiSettings":
        """Load settings from the process environment."""

        provider = os.getenv("LLM_PROVIDER", "xai").strip().lower()
        if provider not in ("xai", "openai"):
            raise ValueError(f"Unsupported LLM_PROVIDER: {provider}")

        return cls(
            google_maps_api_key=os.getenv("GOOGLE_MAPS_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            xai_api_key=os.getenv("XAI_API_KEY"),
            llm_provider=provider,  # type: ignore[arg-type]
            llm_model=os.getenv("LLM_MODEL"),
            max_tool_round_trips=int(os.getenv("ITINERARY_MAX_TOOL_CALLS", "12")),
            generation_timeout_s=float(os.getenv("ITINERARY_TIMEOUT_S", "120")),
            places_timeout_s=float(os.getenv("PLACES_TIMEOUT_S", "10")),
        )

    def ensure(self, field: str) -> str:
        """Return the requested field and fail fast if it is missing."""

        value = getattr(self, field)
        if not value:
            raise RuntimeError(f"Missing configuration value: {field}")
        return value

    def apply_langsmith_tracing(self) -> None:
        """Enable LangSmith tracing defaults and mirror provider keys."""

        os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
        os.environ.setdefault("LANGCHAIN_ENDPOINT", "https://api.smith.langchain.com")
        if self.openai_api_key:
            os.environ.setdefault("OPENAI_API_KEY", self.openai_api_key)
        if self.xai_api_key:
            os.environ.setdefault("XAI_API_KEY", self.xai_api_key)
