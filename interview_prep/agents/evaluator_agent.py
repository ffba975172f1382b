"""Evaluator Agent for scoring a completed interview session."""

from typing import List, Optional

from ..models.enums import Emotion
from ..models.interview import Feedback, InterviewSession
from ..services.scoring import RandomScoreProvider, ScoreProvider
from .base_agent import BaseAgent

NO_ANSWER_PLACEHOLDER = "No answer provided"

FEEDBACK_EMOTIONS = [Emotion.NEUTRAL, Emotion.POSITIVE, Emotion.CONFIDENT]

DEFAULT_SUGGESTIONS = [
    "Try to be more specific with your examples",
    "Use more industry-specific terminology",
    "Elaborate more on your achievements",
]


def build_transcript(session: InterviewSession) -> str:
    """Pair each question with its answer, in question order.

    Blank answers are shown as a placeholder. Pairs are separated by a
    blank line.
    """
    pairs: List[str] = []
    for question, answer in zip(session.questions, session.answers):
        answer_text = answer.text if not answer.is_blank else NO_ANSWER_PLACEHOLDER
        pairs.append(f"Q: {question.text}\nA: {answer_text}")
    return "\n\n".join(pairs)


def build_summary(feedback: Feedback) -> str:
    """Build the natural-language summary from feedback thresholds."""
    performance = feedback.get_performance_tier()
    confidence = "high" if feedback.confidence >= 80 else "moderate"
    clarity = "clear" if feedback.clarity >= 80 else "somewhat clear"
    keywords = "excellent" if feedback.keyword_usage >= 80 else "adequate"
    return (
        f"Overall, your interview performance was {performance}. "
        f"You demonstrated {confidence} confidence and {clarity} communication. "
        f"Your use of industry keywords was {keywords}."
    )


class FeedbackGenerator(BaseAgent):
    """Produces a feedback record for a session from a score provider."""

    def __init__(self, score_provider: Optional[ScoreProvider] = None):
        """Initialize the FeedbackGenerator.

        Args:
            score_provider: Source of scores; random when omitted
        """
        super().__init__("FeedbackGenerator")
        self.score_provider = score_provider or RandomScoreProvider()

    def _initialize_resources(self) -> None:
        self.logger.info(f"FeedbackGenerator using {type(self.score_provider).__name__}")

    async def _cleanup_resources(self) -> None:
        self.logger.info("FeedbackGenerator resources cleaned up")

    async def generate(self, session: InterviewSession) -> Feedback:
        """Score a session.

        Args:
            session: Session whose answers are evaluated

        Returns:
            Feedback with every score bounded to [0, 100]
        """
        provider = self.score_provider
        feedback = Feedback(
            clarity=provider.score(60, 100),
            confidence=provider.score(60, 100),
            filler_words=provider.score(0, 10),
            emotion=provider.choice(FEEDBACK_EMOTIONS),
            keyword_usage=provider.score(60, 100),
            suggestions=list(DEFAULT_SUGGESTIONS),
            overall_score=provider.score(60, 100),
        )
        self.log_operation("generate_feedback", {
            "session_id": session.id,
            "overall_score": feedback.overall_score,
        })
        return feedback
