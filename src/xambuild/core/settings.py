"""Base settings model shared by every tool runner."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from xambuild.errors import ConfigurationError

S = TypeVar("S", bound="ToolSettings")

Configurator = Callable[[S], S]


def _format_errors(e: ValidationError) -> str:
    errors = []
    for err in e.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        errors.append(f"  - {field}: {err['msg']}")
    return "\n".join(errors)


class ToolSettings(BaseModel):
    """Settings for one invocation of one external tool.

    Frozen: derive variations with :meth:`replace` or a configurator
    function rather than mutating in place.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    working_directory: Optional[Path] = None
    tool_path: Optional[Path] = None
    environment_variables: Dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = Field(default=None, gt=0)

    def replace(self: S, **changes) -> S:
        """Return a validated copy with ``changes`` applied."""
        try:
            return type(self).model_validate(self.model_dump() | changes)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid {type(self).__name__}:\n\n{_format_errors(e)}"
            ) from None


def configure(defaults: S, configurator: Optional[Configurator] = None) -> S:
    """Apply an optional caller-supplied transformation to default settings."""
    if configurator is None:
        return defaults
    result = configurator(defaults)
    if not isinstance(result, type(defaults)):
        raise ConfigurationError(
            f"Settings configurator must return {type(defaults).__name__}, got {type(result).__name__}"
        )
    return result
