from typing import Optional, Any, Callable, Dict, Type
from pydantic import BaseModel, ConfigDict


class ParameterSpec(BaseModel):
    """Model-facing description of a single tool parameter.

    Attributes:
        type: JSON schema type of the parameter (e.g. ``"string"``, ``"number"``).
        required: Whether the model must supply the parameter.
        description: Human-readable documentation shown to the model.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    required: bool
    description: str = ""


class ToolDefinition(BaseModel):
    """
    Represents the declaration of a tool the language model may call.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        func: The callable implementing the tool's logic.
        parameters: A JSON schema (object with ``properties`` and ``required``)
                    defining the input parameters for the tool's function.
        args_model: Optional Pydantic model used for validating and coercing arguments.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    func: Callable
    parameters: Optional[Dict[str, Any]] = None
    args_model: Optional[Type[BaseModel]] = None

    @property
    def parameter_specs(self) -> Dict[str, ParameterSpec]:
        """Maps every parameter name to its type, required flag and description."""
        if not self.parameters:
            return {}

        required = set(self.parameters.get("required", []))
        return {
            name: ParameterSpec(
                type=prop.get("type", "string"),
                required=name in required,
                description=prop.get("description", ""),
            )
            for name, prop in self.parameters.get("properties", {}).items()
        }
