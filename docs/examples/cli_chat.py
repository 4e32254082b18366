import asyncio
import logging
from typing import Any, Dict, List, Optional

from yalla_traffic import Settings, TrafficAssistant, setup_logging
from yalla_traffic.core import InvalidRequestError, UserLocation
from yalla_traffic.traffic import YALLA_GREETING, check_health


async def main() -> None:
    """
    Interactive terminal chat with the Yalla traffic assistant.

    Reads API keys from the environment or a .env file. Type 'exit' to quit.
    """
    setup_logging(level=logging.WARNING)
    settings = Settings.from_env()

    health = check_health(settings)
    if health["status"] != "healthy":
        print(f"Error: {health['reason']}.")
        return

    # Downtown Dubai; set to None to chat without a location
    location: Optional[UserLocation] = UserLocation(lat=25.1972, lon=55.2744)
    history: List[Dict[str, Any]] = []

    async with TrafficAssistant.from_settings(settings) as assistant:
        print(f"Yalla ({health['model']}): {YALLA_GREETING}")
        print("Try one of:")
        for suggestion in assistant.suggestions(location is not None):
            print(f"  - {suggestion}")

        print("\nStart chatting! Type 'exit' or 'quit' to stop.")
        while True:
            user_input = input("\nYou: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            try:
                outcome = await assistant.run_conversation(
                    user_input, user_location=location, conversation_history=history
                )
            except InvalidRequestError as e:
                print(f"Invalid request: {e}")
                continue

            print(f"Yalla: {outcome.message}")
            if outcome.tools_used:
                print(f"  (tools: {', '.join(outcome.tools_used)})")

            history.append({"role": "user", "content": user_input})
            history.append({"role": "assistant", "content": outcome.message})


if __name__ == "__main__":
    asyncio.run(main())
