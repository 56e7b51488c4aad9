"""
AI-assisted question generation for assessments.

Builds a prompt from the instructor's request, sends it to the OpenAI chat
completions API and parses the question list out of the reply. Malformed
output fails the request immediately; there is no retry.
"""

import json
import re
from functools import lru_cache
from typing import List, Optional, Union

from openai import OpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import settings
from utils.error_handling import UpstreamServiceError
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("assessment_generator")

JSON_FENCE_PATTERNS = (
    re.compile(r"```json\n([\s\S]*?)\n```"),
    re.compile(r"```\n([\s\S]*?)\n```"),
)

RESPONSE_FORMAT_EXAMPLE = """{
  "questions": [
    {
      "type": "MCQ",
      "question": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": "Option A",
      "explanation": "Explanation for the correct answer"
    },
    {
      "type": "DESCRIPTIVE",
      "question": "Question text here?",
      "sampleAnswer": "Sample answer here",
      "rubric": "Grading criteria here"
    }
  ]
}"""


class GeneratedQuestion(BaseModel):
    """One question as returned by the model"""

    model_config = ConfigDict(extra="allow")

    type: str
    question: str
    options: Optional[List[str]] = None
    correctAnswer: Optional[str] = None
    sampleAnswer: Optional[str] = None
    explanation: Optional[str] = None
    rubric: Optional[str] = None


class GeneratedAssessment(BaseModel):
    model_config = ConfigDict(extra="allow")

    questions: List[GeneratedQuestion] = Field(default_factory=list)


@lru_cache(maxsize=1)
def get_openai_client():
    """Singleton OpenAI client configured from settings"""
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def build_generation_prompt(
    topic: str,
    description: Optional[str],
    assessment_type: str,
    question_formats: Union[str, List[str], None],
    difficulty: Optional[str],
) -> str:
    if isinstance(question_formats, list):
        formats = question_formats
    elif question_formats:
        formats = [question_formats]
    else:
        formats = []
    difficulty = difficulty or "MEDIUM"

    prompt = f'Create an assessment on the topic: "{topic}". '
    if description:
        prompt += f"Additional context: {description}. "
    prompt += (
        f"The assessment is for {assessment_type.lower()} mode and should include the following question types: "
        f"{', '.join(formats)}. "
    )
    prompt += f"The difficulty level should be {difficulty.lower()}. "
    prompt += "For each question type, generate appropriate questions with answers. "
    prompt += "For MCQ questions, include 4 options with the correct answer marked. "
    prompt += f"Format the response as a JSON object with the following structure:\n{RESPONSE_FORMAT_EXAMPLE}\n"
    prompt += "Make sure your response is valid JSON that can be parsed and nothing else."
    return prompt


def extract_json_payload(text: str) -> str:
    """Return the body of a ```json or ``` fenced block, or the text itself"""
    for pattern in JSON_FENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return text


def parse_generated_content(text: str) -> GeneratedAssessment:
    """
    Parse model output into the question-list schema.

    Raises:
        UpstreamServiceError: carrying the raw text when parsing or validation fails
    """
    try:
        payload = json.loads(extract_json_payload(text))
        return GeneratedAssessment.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error("Error parsing AI response", category=LogCategory.AI, exception=e)
        raise UpstreamServiceError("Failed to generate valid assessment content: " + text, raw_output=text)


def generate_assessment_content(
    topic: str,
    description: Optional[str],
    assessment_type: str,
    question_formats: Union[str, List[str], None],
    difficulty: Optional[str],
) -> GeneratedAssessment:
    """Ask the model for questions and return them parsed"""
    prompt = build_generation_prompt(topic, description, assessment_type, question_formats, difficulty)

    try:
        client = get_openai_client()
        response = client.chat.completions.create(
            model=settings.LLM_MODEL_NAME,
            messages=[
                {"role": "system", "content": "You are an assessment author. Reply with JSON only."},
                {"role": "user", "content": prompt},
            ],
        )
        generated_text = response.choices[0].message.content or ""
    except Exception as e:
        logger.error("AI generation request failed", category=LogCategory.AI, exception=e, extra={"topic": topic})
        raise UpstreamServiceError(f"Assessment generation failed: {e}")

    logger.info("AI generation completed", category=LogCategory.AI, extra={"topic": topic, "chars": len(generated_text)})
    return parse_generated_content(generated_text)
