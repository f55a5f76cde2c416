"""
Terminal front end for the chatbot widget.

Usage:
    python -m campus_chatbot.widget.cli
    python -m campus_chatbot.widget.cli --api http://localhost:8080/api

Keys: a number picks an option, r restarts, c closes, o reopens, q quits.
"""
import argparse
import asyncio
import sys

from campus_chatbot.config import Config
from campus_chatbot.widget.client import ChatbotApiClient
from campus_chatbot.widget.controller import ConversationController
from campus_chatbot.widget.state import Phase


async def _ask(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return (await loop.run_in_executor(None, input, prompt)).strip()


def _render(controller: ConversationController, shown: list) -> list:
    messages = controller.messages
    if messages[:len(shown)] != shown:
        # restart replaced the log
        print("-" * 40)
        shown = []
    for message in messages[len(shown):]:
        prefix = "Bot" if message.role == "bot" else "You"
        for i, line in enumerate(message.content.splitlines() or [""]):
            print(f"{prefix + ':' if i == 0 else ' ' * (len(prefix) + 1)} {line}")
    if controller.phase is Phase.IDLE:
        print("[chat closed - press o to reopen]")
    else:
        for index, option in enumerate(controller.options, start=1):
            print(f"  {index}. {option.text}")
        if controller.phase is Phase.DETAIL_VIEW:
            print("  r. Start over")
    return messages


async def run(api_url: str, timeout: float) -> int:
    async with ChatbotApiClient(base_url=api_url, timeout=timeout) as client:
        controller = ConversationController(client)
        controller.open()

        while controller.phase is Phase.AWAITING_IDENTITY:
            name = await _ask("Your name: ")
            email = await _ask("Your email: ")
            if not await controller.submit_identity(name, email):
                print("Please enter your name and a valid email address.")

        shown = _render(controller, [])
        while True:
            choice = (await _ask("> ")).lower()
            if choice == "q":
                break
            if choice == "r":
                await controller.restart()
            elif choice == "c":
                controller.close()
            elif choice == "o":
                controller.open()
            elif choice.isdigit() and 1 <= int(choice) <= len(controller.options):
                await controller.select_option(controller.options[int(choice) - 1])
            else:
                print("Pick a listed number, or r / c / o / q.")
                continue
            shown = _render(controller, shown)

        await controller.drain()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Chat with the campus chatbot from a terminal")
    parser.add_argument("--api", default=Config.CHATBOT_API_URL, help="API base URL")
    parser.add_argument("--timeout", type=float, default=Config.CHATBOT_API_TIMEOUT)
    args = parser.parse_args(argv)
    try:
        return asyncio.run(run(args.api, args.timeout))
    except (KeyboardInterrupt, EOFError):
        print()
        return 0


if __name__ == "__main__":
    sys.exit(main())
