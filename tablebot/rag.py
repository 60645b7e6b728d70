from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .schemas import AnswerCandidate
from .services.knowledge import KnowledgeBase

logger = logging.getLogger(__name__)

# (question, answer) pairs served when no knowledge base file is configured
DEFAULT_FAQS: List[Tuple[str, str]] = [
    ("What are your opening hours? When are you open?",
     "We are open daily 12:00-23:00. Lunch 12:00-15:30, dinner 18:30-23:00."),
    ("Where are you located? What is the address?",
     "You can find us at 21 Via Roma, right next to the central market."),
    ("Do you have vegetarian or vegan options?",
     "Yes, most of our pasta and pizza can be made vegetarian, and we have two vegan mains."),
    ("Do you have parking?",
     "There is a public car park two minutes away; street parking is free after 19:00."),
    ("Can I bring my dog? Are pets allowed?",
     "Dogs are welcome on the terrace."),
    ("How do I make a reservation or book a table?",
     "Just tell me how many people and what time, for example 'book a table for 4 at 7pm'."),
    ("Do you do takeaway or delivery?",
     "We offer takeaway for all pizzas; call us and it will be ready in 20 minutes."),
]


def load_faqs(path: str) -> List[Tuple[str, str]]:
    """Read ``[{"question": ..., "answer": ...}]`` from a JSON file."""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    return [(item["question"], item["answer"]) for item in data if item.get("answer")]


class TfidfKnowledgeBase(KnowledgeBase):
    def __init__(self, faqs: Optional[Sequence[Tuple[str, str]]] = None, top_k: int = 3, min_score: float = 0.1):
        self.faqs = list(faqs if faqs is not None else DEFAULT_FAQS)
        self.top_k = top_k
        self.min_score = min_score
        self._vectorizer: Optional[TfidfVectorizer] = None
        self._matrix = None
        if self.faqs:
            # Index question and answer together so either can match
            docs = [f"{q} {a}" for q, a in self.faqs]
            self._vectorizer = TfidfVectorizer(stop_words="english")
            self._matrix = self._vectorizer.fit_transform(docs)

    async def get_answers(self, text: str) -> List[AnswerCandidate]:
        return self.retrieve(text)

    def retrieve(self, query: str) -> List[AnswerCandidate]:
        if self._vectorizer is None or not (query or "").strip():
            return []
        qv = self._vectorizer.transform([query])
        sims = cosine_similarity(qv, self._matrix).ravel()
        idx = sims.argsort()[::-1][: self.top_k]
        answers = [
            AnswerCandidate(text=self.faqs[i][1], score=float(sims[i]))
            for i in idx
            if sims[i] >= self.min_score and sims[i] > 0
        ]
        logger.debug("Knowledge base returned %d answer(s) for %r", len(answers), query)
        return answers
