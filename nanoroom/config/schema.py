"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings

# U+2005 FOUR-PER-EM SPACE, the separator chat clients put between @mentions
MENTION_SEPARATOR = "\u2005"


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoomConfig(Base):
    """Room entity behaviour."""
    default_topic_member_count: int = Field(default=3, ge=1)  # Names used for a synthesized topic
    mention_separator: str = MENTION_SEPARATOR


class LoggingConfig(Base):
    """Logging sinks configuration."""
    level: str = "INFO"
    file: Path | None = None  # Rotating file sink, disabled when empty
    verbose: bool = False


class Config(BaseSettings):
    """Root configuration for nanoroom."""
    room: RoomConfig = Field(default_factory=RoomConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        env_prefix="NANOROOM_",
        env_nested_delimiter="__"
    )
