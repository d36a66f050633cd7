# Terminal front end for the chat proxy. Each line typed and confirmed with
# Enter is one submit; replies print as they arrive.

import asyncio
import sys

from config import PROXY_URL
from models.conversation import ConversationSnapshot, Origin
from services.conversation_controller import ConversationController
from services.proxy_client import HttpProxyClient


class TranscriptPrinter:
    """Prints assistant turns the first time they show up in a snapshot."""

    def __init__(self) -> None:
        self.printed = 0

    def __call__(self, snapshot: ConversationSnapshot) -> None:
        for turn in snapshot.transcript[self.printed:]:
            if turn.origin == Origin.ASSISTANT:
                print(f"AI: {turn.text}")
        self.printed = len(snapshot.transcript)
        if snapshot.pending:
            print("AI is thinking...")


async def run(url: str) -> None:
    controller = ConversationController(HttpProxyClient(url))
    controller.subscribe(TranscriptPrinter())

    print("Persona Chat CLI")
    print(f"proxy: {url}")
    print("Commands: /exit")
    print("-" * 50)

    while True:
        try:
            line = await asyncio.to_thread(input, "\nYou: ")
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if line.strip().lower() in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        controller.update_draft(line)
        await controller.send()


def main() -> None:
    url = sys.argv[1] if len(sys.argv) > 1 else PROXY_URL
    asyncio.run(run(url))


if __name__ == "__main__":
    main()
