"""Adapter around the generative text service.

Builds the per-policy prompt, sends one chat-completion request and parses
the reply into raw item dicts. Validation of those dicts belongs to the
orchestrator; this module only guarantees "a JSON array or an error".
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from ..errors import GenerationServiceError, InvalidGenerationFormatError
from ..models import QuestionType
from .policy import GenerationPolicy

__all__ = ["GenerationClient", "build_prompt", "parse_drafts"]

SYSTEM_PROMPT = (
    "You are an expert in creating educational content for children. "
    "Always respond with valid JSON only, no additional text or formatting."
)

_SAFETY_RULES = """CRITICAL CHILD SAFETY REQUIREMENTS:
- Content MUST be 100% appropriate for young children (ages 6-10)
- NO scary, violent, inappropriate, or mature content whatsoever
- Use only positive, educational, and age-appropriate language
- Focus on basic, foundational knowledge suitable for elementary school
- Questions should be encouraging and fun, never frightening or disturbing
- All content must be factual and match what children's educational materials teach

CONTENT GUIDELINES:
- Use simple vocabulary (no words above 4th grade reading level)
- Ask about basic facts, colors, numbers, simple science concepts
- Ensure all facts are accurate and verifiable
- No complex or abstract concepts beyond elementary level"""

_GENERAL_EXAMPLES = """Multiple Choice: {"text": "What color do you get when you mix red and yellow?", "type": "multiple_choice", "options": ["Purple", "Orange", "Green", "Blue"], "correct_answer": "Orange", "fun_fact": "Orange is a secondary color made by mixing two primary colors!"}

True/False: {"text": "The sun is a star.", "type": "true_false", "options": ["True", "False"], "correct_answer": "True", "fun_fact": "The sun is the closest star to Earth!"}

Fill in blank: {"text": "A group of lions is called a ____.", "type": "fill_blank", "options": null, "correct_answer": "pride", "fun_fact": "Lions live together in family groups called prides!"}

Yes/No: {"text": "Do penguins live at the North Pole?", "type": "yes_no", "options": ["Yes", "No"], "correct_answer": "No", "fun_fact": "Penguins actually live in Antarctica at the South Pole!"}"""

_TYPE_LINES = {
    QuestionType.MULTIPLE_CHOICE: "Multiple Choice (4 options)",
    QuestionType.TRUE_FALSE: 'True/False (options exactly ["True", "False"])',
    QuestionType.FILL_BLANK: "Fill in the blank (options null)",
    QuestionType.YES_NO: 'Yes/No (options exactly ["Yes", "No"])',
    QuestionType.VOICE_INPUT: "Spoken answer (options null)",
}


def _voice_section(policy: GenerationPolicy) -> str:
    language = policy.answer_language or "the target language"
    return (
        f"For {language} topics, create ONLY vocabulary questions:\n"
        f"- Ask for {language} words for simple English words\n"
        '- Use "voice_input" type for all questions (children will speak '
        "the answer)\n"
        "- Focus on basic vocabulary: family members, colors, numbers, "
        "animals, body parts, food items\n"
        f"- correct_answer must be written in {language} script, one word, "
        "no transliteration or punctuation"
    )


def _mixed_section(policy: GenerationPolicy) -> str:
    lines = [
        f"{idx}. {_TYPE_LINES[qtype]}"
        for idx, qtype in enumerate(policy.question_types, start=1)
    ]
    per_type = policy.batch_size // max(1, len(policy.question_types))
    return (
        "Create a mix of different question types (distribute evenly, about "
        f"{per_type} of each):\n" + "\n".join(lines)
    )


def build_prompt(topic_name: str, policy: GenerationPolicy) -> str:
    """Return the user prompt for one batch of ``policy.batch_size`` items."""

    count = policy.batch_size
    if policy.is_voice_only:
        variety = _voice_section(policy)
        type_field = "voice_input"
        options_field = "null"
        language = policy.answer_language or "the target language"
        example = {
            "text": f"What is the {language} word for 'Water'?",
            "type": "voice_input",
            "options": None,
            "correct_answer": f"<the word in {language} script>",
            "fun_fact": "Water is essential for all living things!",
        }
        examples = f"{language} Voice Input: {json.dumps(example)}"
        closing = f" focused on basic {language} vocabulary"
    else:
        variety = _mixed_section(policy)
        type_field = "|".join(t.value for t in policy.question_types)
        options_field = (
            '["Option A", "Option B", "Option C", "Option D"] OR '
            '["True", "False"] OR ["Yes", "No"] OR null for fill_blank'
        )
        examples = _GENERAL_EXAMPLES
        closing = " with a good mix of question types"

    return f"""Create exactly {count} educational quiz questions for children aged 6-10 years old about "{topic_name}".

{_SAFETY_RULES}

QUESTION TYPE VARIETY:
{variety}

SPECIFIC REQUIREMENTS:
- Each question should be age-appropriate with simple, clear language
- Include a fun, educational fact for each question that children would find interesting
- For questions with options, correct_answer must be copied exactly from one of the options

FORMAT REQUIREMENT:
Format your response as a JSON array with exactly this structure:
[
  {{
    "text": "Question text here?",
    "type": "{type_field}",
    "options": {options_field},
    "correct_answer": "The correct answer",
    "fun_fact": "Fun educational fact here!"
  }}
]

EXAMPLES:
{examples}

Topic: {topic_name}
Remember: All content must be completely safe and appropriate for young children. Generate exactly {count} questions{closing} now:"""


def _try_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_drafts(content: str) -> List[Any]:
    """Parse a model reply into a list of raw items.

    Accepts a bare JSON array, one wrapped in a Markdown code fence, or an
    object whose single value is the array (``{"questions": [...]}``).
    """

    if not content or not content.strip():
        raise InvalidGenerationFormatError("Empty response from model")
    fenced = re.search(r"```(?:json)?\s*(.+?)```", content, re.DOTALL)
    payload = fenced.group(1) if fenced else content
    data = _try_json(payload.strip())
    if data is None:
        match = re.search(r"(\[\s*\{.*\}\s*\])", payload, re.DOTALL)
        if match:
            data = _try_json(match.group(1))
    if isinstance(data, dict) and len(data) == 1:
        (data,) = data.values()
    if not isinstance(data, list):
        raise InvalidGenerationFormatError(
            "Model response is not a JSON array of questions"
        )
    return data


class GenerationClient:
    """Chat-completions client for question batches.

    ``client`` is an ``openai.OpenAI`` instance (or anything exposing
    ``chat.completions.create``). ``None`` means no credentials were
    available; every call then fails with ``GenerationServiceError``.
    """

    def __init__(
        self,
        client: Optional[Any],
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 3000,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def complete(self, prompt: str) -> str:
        if self.client is None:
            raise GenerationServiceError(
                "Generation service credentials are not configured"
            )
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = resp.choices[0].message.content
        except Exception as exc:
            raise GenerationServiceError(
                f"Generation request failed: {exc}"
            ) from exc
        if not content or not content.strip():
            raise GenerationServiceError("Generation service returned no text")
        return content.strip()

    def generate(self, topic_name: str, policy: GenerationPolicy) -> List[Any]:
        """Request one batch for ``topic_name`` and return the raw items."""

        return parse_drafts(self.complete(build_prompt(topic_name, policy)))
