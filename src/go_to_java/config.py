import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from go_to_java.core.cache import DEFAULT_TTL_SECONDS
from go_to_java.core.generator import GenerationOptions
from go_to_java.core.oracle import DEFAULT_TIMEOUT_SECONDS
from go_to_java.core.parsing import ParserName, normalize_parser
from go_to_java.core.resolver import DEFAULT_MAX_DEPTH

ENV_PREFIX = "GO_TO_JAVA_"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    parser: ParserName = "tree-sitter"
    emit_constructors: bool = True
    emit_getters_setters: bool = True
    emit_doc_comments: bool = True
    emit_external_types: bool = True
    emit_learning_notes: bool = False
    errors_as_exceptions: bool = True
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    resolve_stdlib: bool = False
    oracle_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    cache_ttl: float = Field(default=DEFAULT_TTL_SECONDS, ge=0)
    use_resolver: bool = True

    @field_validator("parser", mode="before")
    @classmethod
    def _normalize_parser(cls, value: Any) -> Any:
        return normalize_parser(value) if isinstance(value, str) else value

    def generation_options(self, class_name: str | None = None) -> GenerationOptions:
        return GenerationOptions(
            class_name=class_name,
            emit_constructors=self.emit_constructors,
            emit_getters_setters=self.emit_getters_setters,
            emit_doc_comments=self.emit_doc_comments,
            emit_external_types=self.emit_external_types,
            emit_learning_notes=self.emit_learning_notes,
            errors_as_exceptions=self.errors_as_exceptions,
        )


def load_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Build settings from ``GO_TO_JAVA_*`` environment variables plus explicit overrides.

    Overrides whose value is ``None`` are ignored so CLI options can be passed
    through unconditionally.
    """
    values: dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            values[name] = raw
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings.model_validate(values)
