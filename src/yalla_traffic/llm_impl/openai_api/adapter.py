import json
from typing import Any, Dict, List, Optional

from openai.types.chat import ChatCompletion, ChatCompletionToolParam

from yalla_traffic.core import ToolCallRequest, ToolRegistry
from yalla_traffic.core.messages import (
    AssistantMessage,
    ConversationContext,
    SystemMessage,
    ToolMessage,
    UserMessage,
)


class OpenAIToolAdapter:
    """Adapter for OpenAI chat-completions tool handling."""

    @staticmethod
    def build_tool_object(registry: ToolRegistry) -> Optional[List[ChatCompletionToolParam]]:
        """Render the registry as OpenAI function tools, or None if it is empty."""
        if not len(registry):
            return None

        tools: List[ChatCompletionToolParam] = []
        for tool in registry.tools.values():
            tools.append(
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters or {"type": "object", "properties": {}},
                    },
                }
            )
        return tools

    @staticmethod
    def convert_context(context: ConversationContext) -> List[Dict[str, Any]]:
        """
        Converts the conversation context to OpenAI message dictionaries.

        Args:
            context: The conversation context.

        Returns:
            List of OpenAI message dictionaries.
        """
        messages: List[Dict[str, Any]] = []
        for msg in context:
            if isinstance(msg, SystemMessage):
                messages.append({"role": "system", "content": msg.content})
            elif isinstance(msg, UserMessage):
                messages.append({"role": "user", "content": msg.content})
            elif isinstance(msg, AssistantMessage):
                openai_msg: Dict[str, Any] = {"role": "assistant", "content": msg.content or None}
                if msg.tool_calls:
                    openai_msg["tool_calls"] = [OpenAIToolAdapter._convert_tool_call(tc) for tc in msg.tool_calls]
                messages.append(openai_msg)
            elif isinstance(msg, ToolMessage):
                messages.append({"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id})
        return messages

    @staticmethod
    def _convert_tool_call(tool_call: ToolCallRequest) -> Dict[str, Any]:
        arguments = tool_call.arguments
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments or {})
        return {
            "id": tool_call.call_id,
            "type": "function",
            "function": {"name": tool_call.name, "arguments": arguments},
        }

    @staticmethod
    def get_tool_calls(response: ChatCompletion) -> List[ToolCallRequest]:
        """Extract tool calls from an OpenAI chat completion response.

        Args:
            response: The chat completion response from OpenAI.

        Returns:
            The tool call requests in the order the model issued them.
        """
        if not response.choices:
            return []

        tool_calls = response.choices[0].message.tool_calls
        if not tool_calls:
            return []

        requests = []
        for tool_call in tool_calls:
            if tool_call.type == "function":
                requests.append(
                    ToolCallRequest(
                        name=tool_call.function.name,
                        arguments=tool_call.function.arguments,
                        call_id=tool_call.id,
                    )
                )
        return requests

    @staticmethod
    def get_text(response: ChatCompletion) -> str:
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
