import logging

from .context import TurnContext
from .services.knowledge import KnowledgeBase

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD = "Sorry, I didn't understand that."


class RetrievalFallback:
    """Answers with the single best knowledge-base entry."""

    def __init__(self, knowledge_base: KnowledgeBase):
        self.knowledge_base = knowledge_base

    async def answer(self, ctx: TurnContext) -> None:
        answers = await self.knowledge_base.get_answers(ctx.text)
        if not answers:
            logger.info("No knowledge base answer for %r", ctx.text)
            await ctx.send(NOT_UNDERSTOOD)
            return
        await ctx.send(answers[0].text)
