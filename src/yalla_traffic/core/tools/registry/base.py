"""Tool registry holding the closed set of tools the model may call."""

import inspect
from types import MappingProxyType
from typing import Callable, Dict, Any, Iterable, List, Mapping, Union, Optional, cast

import jsonref  # type: ignore
from pydantic import create_model

from ..models import ToolDefinition
from ..schema import ToolParameterFactory, SchemaValidator
from ...exceptions import ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """
    A central registry to manage and access the tools available to the LLM.

    This class holds the declarations sent to the model and maps tool names to
    their implementations. Tools are registered while the registry is being
    built; once :meth:`freeze` has been called the registry is read-only and
    can be shared between any number of concurrent conversations.
    """

    def __init__(self, tools: Optional[Iterable[ToolDefinition]] = None) -> None:
        """Initialize the ToolRegistry.

        Args:
            tools: Optional tool definitions to register straight away.
        """
        self._tools: Dict[str, ToolDefinition] = {}
        self._frozen = False
        for tool in tools or []:
            self.register(tool)

    def register(
        self,
        name_or_tool: Union[str, ToolDefinition, Callable],
        description: Optional[str] = None,
        func: Optional[Callable] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Register a new tool for the LLM.

        A tool can be registered from a `ToolDefinition`, from its individual
        components (name, description, function, parameters), or from a
        callable whose signature and docstring describe the tool.

        Args:
            name_or_tool: Either a `ToolDefinition` object, the name of the tool (str), or a Callable.
            description: A brief description of what the tool does. Required if `name_or_tool` is a string and parameters are provided.
            func: The callable implementing the tool's logic. Required if `name_or_tool` is a string.
            parameters: A JSON schema defining the tool's input parameters. If None, it is inferred from `func`.

        Raises:
            ToolRegistrationError: If the registry is frozen, arguments are missing, or the tool already exists.
        """
        if self._frozen:
            msg = "Cannot register tools on a frozen registry."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(name_or_tool, description=description)
        else:
            if func is None:
                raise ToolRegistrationError("If passing name as string, func is required.")

            if parameters is None:
                tool = self._generate_tool_definition(func, name=name_or_tool, description=description)
            else:
                if description is None:
                    raise ToolRegistrationError("If passing name and parameters, description is required.")
                tool = ToolDefinition(name=name_or_tool, description=description, func=func, parameters=parameters)

        if tool.name in self._tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        self._tools[tool.name] = tool
        logger.info(f"Successfully registered tool: '{tool.name}'")

    def freeze(self) -> "ToolRegistry":
        """Make the registry read-only. Returns the registry for chaining."""
        self._frozen = True
        logger.debug(f"Registry frozen with {len(self._tools)} tools: {', '.join(self._tools)}")
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        """Return the tool registered under ``name``, or None."""
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tools(self) -> Mapping[str, ToolDefinition]:
        """Read-only view of the registered tools, keyed by name."""
        return MappingProxyType(self._tools)

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def _generate_tool_definition(
        self, func: Callable, name: Optional[str] = None, description: Optional[str] = None
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a callable.

        Args:
            func: The function to generate a definition for.
            name: Optional name override for the tool.
            description: Optional description override for the tool.

        Returns:
            A ToolDefinition object containing the tool's metadata and schema.

        Raises:
            ToolValidationError: If the function is missing a docstring or parameter descriptions.
        """
        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        signature = inspect.signature(func)
        fields = self._build_fields(signature, tool_name)

        # create_model expects **field_definitions: Any
        dynamic_params_model = create_model(f"{tool_name}Params", **cast(Dict[str, Any], fields))
        raw_schema = dynamic_params_model.model_json_schema()
        SchemaValidator.assert_no_recursive_refs(raw_schema)

        # proxies=False ensures we get a plain dict back, not JsonRef objects
        parameters_schema = jsonref.replace_refs(raw_schema, proxies=False)
        parameters_schema = SchemaValidator.sanitize_schema(parameters_schema)

        return ToolDefinition(
            name=tool_name,
            description=description,
            func=func,
            parameters=parameters_schema,
            args_model=dynamic_params_model,
        )

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. LLMs need a description of what the tool does."
            logger.error(msg)
            raise ToolValidationError(msg)
        return doc

    @staticmethod
    def _build_fields(signature: inspect.Signature, tool_name: str) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue
            ft = ToolParameterFactory.build_field_tuple(param_name=param_name, param=param, tool_name=tool_name)
            fields[param_name] = (ft.annotation, ft.field)
        return fields
