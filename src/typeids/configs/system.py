from pydantic import BaseModel, Field


class GeneratorConfig(BaseModel):
    """UUIDv7 generator settings."""

    tick_retries: int = Field(
        default=64,
        ge=0,
        description=(
            "Clock re-reads allowed when a millisecond's sequence space is "
            "exhausted before falling back to a forced bump"
        ),
    )
    shared: bool = Field(
        default=False,
        description=(
            "Use one process-wide locked generator for TypeID.new() instead "
            "of one generator per thread (serialises all generation)"
        ),
    )


class LoggingConfig(BaseModel):
    """Logging bootstrap settings."""

    level: str = Field(default="WARNING", description="Root log level")
    json_output: bool = Field(
        default=False, description="Emit JSON lines instead of plain text"
    )


class MetricsConfig(BaseModel):
    """Prometheus counter settings."""

    enabled: bool = Field(default=True, description="Record generation metrics")
