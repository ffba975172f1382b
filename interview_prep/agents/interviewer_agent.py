"""Interviewer Agent for generating the question list of a session."""

from typing import List

from ..models.interview import Question
from ..utils.exceptions import ConfigurationError, ValidationError
from .base_agent import BaseAgent

DEFAULT_QUESTION_COUNT = 5

QUESTION_TEMPLATES = [
    "Tell me about your experience with {role}?",
    "What are the key skills required for a {role} position?",
    "Describe a challenging project you worked on as a {role}.",
    "How do you stay updated with the latest trends in {role}?",
    "Where do you see yourself in 5 years as a {role}?",
    "Tell me about a time you disagreed with a teammate while working as a {role}.",
    "What would you do in your first 90 days as a {role}?",
    "Which metrics would you use to measure success as a {role}?",
]

JOB_DESCRIPTION_TEMPLATE = "Which parts of this job description match your background as a {role}?"


class QuestionGenerator(BaseAgent):
    """Generates a fixed, ordered list of templated questions for a role."""

    def __init__(self, question_count: int = DEFAULT_QUESTION_COUNT):
        """Initialize the QuestionGenerator.

        Args:
            question_count: Number of questions per session

        Raises:
            ConfigurationError: If question_count is not positive
        """
        super().__init__("QuestionGenerator")
        if question_count < 1:
            raise ConfigurationError("question_count must be at least 1", config_key="interview.default_question_count")
        self.question_count = question_count

    def _initialize_resources(self) -> None:
        self.logger.info(f"QuestionGenerator ready with {self.question_count} questions per session")

    async def _cleanup_resources(self) -> None:
        self.logger.info("QuestionGenerator resources cleaned up")

    async def generate(self, role: str, job_description: str = "") -> List[Question]:
        """Generate the questions for a new session.

        The count is always ``question_count``. When a job description is
        given, the last question asks the candidate to relate to it.

        Raises:
            ValidationError: If role is blank
        """
        role = (role or "").strip()
        if not role:
            raise ValidationError("Role is required", field_name="role")

        templates = [QUESTION_TEMPLATES[i % len(QUESTION_TEMPLATES)] for i in range(self.question_count)]
        if job_description and job_description.strip():
            templates[-1] = JOB_DESCRIPTION_TEMPLATE

        questions = [Question(text=template.format(role=role)) for template in templates]
        self.log_operation("generate_questions", {"role": role, "count": len(questions)})
        return questions
