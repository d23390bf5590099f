from pydantic import BaseModel, ConfigDict, Field


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    text: str | None = Field(
        default=None,
        description="Generated text content, None when the response carried no text"
    )
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
