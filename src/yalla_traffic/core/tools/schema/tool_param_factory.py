"""Turns tool function parameters into pydantic field definitions."""

import inspect
from typing import Annotated, Any, NamedTuple, NoReturn, Optional, get_args, get_origin

from pydantic import Field
from pydantic.fields import FieldInfo

from ...exceptions import ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

# Tool arguments arrive as one JSON object, so only named parameters can be filled.
_UNSUPPORTED_KINDS = (
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
    inspect.Parameter.POSITIONAL_ONLY,
)


class FieldTuple(NamedTuple):
    """An ``(annotation, FieldInfo)`` pair as expected by ``pydantic.create_model``."""

    annotation: Any
    field: FieldInfo


class ToolParameterFactory:
    """Builds the argument model fields for a tool, one parameter at a time."""

    @classmethod
    def build_field_tuple(cls, param_name: str, param: inspect.Parameter, tool_name: str) -> FieldTuple:
        """
        Args:
            param_name: The parameter name, used as the JSON argument key.
            param: The parameter as reported by ``inspect.signature``.
            tool_name: The owning tool, for error messages.

        Raises:
            ToolValidationError: If the parameter is variadic or positional-only,
                or its annotation carries no ``Field(description=...)``.
        """
        if param.kind in _UNSUPPORTED_KINDS:
            cls._fail(f"Parameter '{param_name}' in tool '{tool_name}' must be a named keyword parameter.")

        description = cls.description_of(param.annotation)
        if description is None:
            cls._fail(
                f"Parameter '{param_name}' in tool '{tool_name}' is missing a description.\n"
                f"Usage: {param_name}: Annotated[Type, Field(description='...')]"
            )

        default = ... if param.default is inspect.Parameter.empty else param.default
        return FieldTuple(param.annotation, Field(default=default, description=description))

    @staticmethod
    def description_of(annotation: Any) -> Optional[str]:
        """First non-empty ``Field`` description in an ``Annotated`` hint, or None."""
        if get_origin(annotation) is not Annotated:
            return None
        return next(
            (meta.description for meta in get_args(annotation)[1:] if isinstance(meta, FieldInfo) and meta.description),
            None,
        )

    @staticmethod
    def _fail(msg: str) -> NoReturn:
        logger.error(msg)
        raise ToolValidationError(msg)
