import asyncio
import logging
from uuid import uuid4

from tablebot.bootstrap import build_dispatcher
from tablebot.config import settings
from tablebot.dispatcher import TurnDispatcher
from tablebot.errors import ServiceUnavailableError, StoreUnavailableError
from tablebot.schemas import ConversationTurn, TurnKind
from tablebot.transport import ConsoleTransport

EXIT_WORDS = ['exit', 'quit', 'bye']


class RestaurantChat:
    def __init__(self, dispatcher: TurnDispatcher, conversation_id: str = None):
        self.dispatcher = dispatcher
        self.conversation_id = conversation_id or uuid4().hex[:8]
        self.running = True

    async def join(self):
        """Announce the bot joining, which triggers the welcome message"""
        await self.dispatcher.handle_turn(ConversationTurn(
            kind=TurnKind.PARTICIPANT_JOINED,
            conversation_id=self.conversation_id,
            joined_participant_ids=["bot"],
        ))

    async def say(self, text: str) -> bool:
        """Send one line to the bot; returns False once the user wants to leave"""
        if text.lower() in EXIT_WORDS:
            print("\n👋 Thank you for chatting with us! Have a great day!")
            self.running = False
            return False
        try:
            await self.dispatcher.handle_turn(ConversationTurn(
                kind=TurnKind.MESSAGE,
                text=text,
                conversation_id=self.conversation_id,
            ))
        except (ServiceUnavailableError, StoreUnavailableError) as e:
            print(f"\n❌ The assistant is unavailable right now: {e}")
        return True

    async def start(self):
        print("\n🍽️  Welcome to the Restaurant Assistant!")
        print("Type 'exit' to quit at any time.")
        await self.join()

        while self.running:
            try:
                user_input = input("\nYou: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n👋 Goodbye!")
                self.running = False
                continue
            await self.say(user_input)


def main():
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    chat = RestaurantChat(build_dispatcher(settings, ConsoleTransport()))
    asyncio.run(chat.start())


if __name__ == "__main__":
    main()
