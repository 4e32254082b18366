"""Translate between the conversation context and Gemini's content / function-calling payloads."""

from typing import Any, Dict, List, Optional, cast

from google.genai import types
from google.genai.types import GenerateContentResponse

from yalla_traffic.core import ToolCallRequest, ToolRegistry, get_logger
from yalla_traffic.core.messages import (
    AssistantMessage,
    BaseMessage,
    ConversationContext,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from yalla_traffic.core.tools import normalize_arguments

logger = get_logger(__name__)


class GeminiToolAdapter:
    """Adapter for Gemini tool handling."""

    @staticmethod
    def build_tool_object(registry: ToolRegistry) -> Optional[types.Tool]:
        """
        Generates a `types.Tool` object suitable for the Gemini API from the registry.

        Returns:
            A `types.Tool` object containing all function declarations,
            or None if no tools are registered.
        """
        if not len(registry):
            return None

        declarations = []
        for tool in registry.tools.values():
            if tool.parameters:
                # Gemini does not support 'additionalProperties' in the schema
                clean_params = GeminiToolAdapter._strip_additional_properties(tool.parameters)
                declarations.append(
                    types.FunctionDeclaration(name=tool.name, description=tool.description, parameters=clean_params)
                )
            else:
                declarations.append(types.FunctionDeclaration(name=tool.name, description=tool.description))

        return types.Tool(function_declarations=declarations)

    @staticmethod
    def _strip_additional_properties(schema: Any) -> Any:
        """Recursively removes 'additionalProperties' from the schema."""
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()
        new_schema.pop("additionalProperties", None)

        for key, value in new_schema.items():
            if isinstance(value, dict):
                new_schema[key] = GeminiToolAdapter._strip_additional_properties(value)
            elif isinstance(value, list):
                new_schema[key] = [GeminiToolAdapter._strip_additional_properties(item) for item in value]
        return new_schema

    @staticmethod
    def convert_context(context: ConversationContext) -> List[types.Content]:
        """
        Converts the conversation context to Gemini Content objects.

        System turns are skipped; Gemini receives them through
        ``system_instruction`` in the request config.
        """
        contents: List[types.Content] = []
        for msg in context:
            content = GeminiToolAdapter._convert_message(msg)
            if content is not None:
                contents.append(content)
        return contents

    @staticmethod
    def _convert_message(msg: BaseMessage) -> Optional[types.Content]:
        if isinstance(msg, SystemMessage):
            return None

        if isinstance(msg, UserMessage):
            return types.Content(role="user", parts=[types.Part(text=msg.content)])

        if isinstance(msg, AssistantMessage):
            parts: List[types.Part] = []
            if msg.content:
                parts.append(types.Part(text=msg.content))
            for call in msg.tool_calls or []:
                parts.append(
                    types.Part(
                        function_call=types.FunctionCall(
                            id=call.call_id,
                            name=call.name,
                            args=normalize_arguments(call.name, call.arguments),
                        )
                    )
                )
            if not parts:
                return None
            return types.Content(role="model", parts=parts)

        if isinstance(msg, ToolMessage):
            return types.Content(
                role="user",
                parts=[
                    types.Part(
                        function_response=types.FunctionResponse(
                            id=msg.tool_call_id,
                            name=msg.name,
                            response=msg.response,
                        )
                    )
                ],
            )

        logger.warning(f"Skipping unsupported message type {type(msg).__name__}.")
        return None

    @staticmethod
    def get_tool_calls(response: GenerateContentResponse) -> List[ToolCallRequest]:
        """Extract tool calls from a Gemini content response."""
        return [
            ToolCallRequest(
                name=cast(str, part.function_call.name),
                arguments=dict(part.function_call.args or {}),
                call_id=part.function_call.id,
            )
            for part in GeminiToolAdapter._parts(response)
            if part.function_call
        ]

    @staticmethod
    def get_text(response: GenerateContentResponse) -> str:
        return "".join(part.text for part in GeminiToolAdapter._parts(response) if part.text)

    @staticmethod
    def _parts(response: GenerateContentResponse) -> List[types.Part]:
        if not response.candidates:
            logger.error("No candidate in Gemini response.")
            return []
        content = response.candidates[0].content
        if content is None or not content.parts:
            return []
        return list(content.parts)

    @staticmethod
    def usage(response: GenerateContentResponse) -> Dict[str, Optional[int]]:
        usage = response.usage_metadata
        if usage is None:
            return {}
        return {
            "prompt_tokens": usage.prompt_token_count,
            "candidates_tokens": usage.candidates_token_count,
            "total_tokens": usage.total_token_count,
        }
