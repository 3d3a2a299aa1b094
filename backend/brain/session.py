"""Study session generator: concise notes plus three practice questions."""

from pydantic import ValidationError

from brain.client import complete, parse_json_response, AIResponseError
from brain.schemas import StudySessionRequest, StudySession


def _build_session_prompt(data: StudySessionRequest) -> str:
    return f"""Act as an expert tutor for the {data.exam} exam. The student wants to study the topic "{data.topic}" for approximately {data.minutes} minutes.
Provide two things in a JSON object:
1. "notes": A concise summary of the most important concepts for this topic, formatted as an HTML string with headings, lists, and bold text.
2. "questions": An array of exactly three multiple-choice practice questions. Each question object has: "q" (the question text), "options" (an array of 4 string options), "answer" (the 0-based index of the correct option), and "explanation" (a brief justification for the correct answer).

Return ONLY the raw JSON object, without any markdown formatting or commentary.

Example JSON Structure:
{{
  "notes": "<h1>Main Concept</h1><p>Details about the concept...</p>",
  "questions": [
    {{
      "q": "What is the capital of France?",
      "options": ["London", "Berlin", "Paris", "Madrid"],
      "answer": 2,
      "explanation": "Paris is the capital of France."
    }}
  ]
}}"""


def generate_study_session(data: StudySessionRequest) -> StudySession:
    raw = complete(_build_session_prompt(data))
    try:
        return StudySession.model_validate(parse_json_response(raw, expect="object"))
    except ValidationError as exc:
        raise AIResponseError("AI returned data in an unexpected format.") from exc
