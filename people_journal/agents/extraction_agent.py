from typing import List
import json
import logging

from pydantic import ValidationError

from .base_agent import BaseAgent
from ..core.exceptions import ExtractionParseError
from ..schemas import ExtractionResult

logger = logging.getLogger(__name__)

TAGS: List[str] = [
    "career growth", "blockers", "wins", "feedback given", "feedback received",
    "cross-team", "technical debt", "hiring", "process", "personal", "morale",
    "autonomy", "project update", "conflict", "learning",
]


def strip_markdown_fences(text: str) -> str:
    """Remove a surrounding ```json / ``` fence if the model added one"""
    clean = text.strip()
    if clean.startswith("```json"):
        clean = clean[len("```json"):]
    elif clean.startswith("```"):
        clean = clean[len("```"):]
    if clean.endswith("```"):
        clean = clean[:-len("```")]
    return clean.strip()


class ExtractionAgent(BaseAgent):
    """Turns a 1:1 transcript into structured entry fields"""

    def build_prompt(self, member_name: str, transcript: str) -> str:
        tag_list = ", ".join(TAGS)
        return f"""You are helping an engineering manager process a 1:1 meeting transcript with their report named {member_name}. Extract structured information and respond ONLY with a JSON object (no markdown, no backticks, no preamble). The JSON should have these fields:

{{
  "summary": "2-4 sentence summary of the key discussion points",
  "tags": ["array of relevant tags from this list: {tag_list}"],
  "action_items_mine": ["action items for the manager"],
  "action_items_theirs": ["action items for {member_name}"],
  "morale_score": <1-5 integer, your best read on their energy/morale based on tone>,
  "morale_rationale": "1-2 sentence explanation of why you gave this morale score, citing specific things from the conversation",
  "growth_score": <1-5 integer, signals of professional growth or stagnation>,
  "growth_rationale": "1-2 sentence explanation of why you gave this growth score, citing specific things from the conversation",
  "notable_quotes": ["1-2 notable or important things {member_name} said, verbatim if possible"],
  "blockers": ["any blockers or frustrations mentioned"],
  "wins": ["any wins, accomplishments, or positive things mentioned"]
}}

Here is the transcript:

{transcript}"""

    def parse_response(self, text: str) -> ExtractionResult:
        """Parse the model's reply; raise ExtractionParseError if unusable"""
        clean = strip_markdown_fences(text)
        try:
            data = json.loads(clean)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse extraction JSON: {e}")
            raise ExtractionParseError(f"Failed to parse extraction JSON: {e}") from e

        if not isinstance(data, dict):
            raise ExtractionParseError("Failed to parse extraction JSON: expected an object")

        try:
            return ExtractionResult.model_validate(data)
        except ValidationError as e:
            logger.error(f"Extraction JSON does not match schema: {e}")
            raise ExtractionParseError(f"Extraction JSON does not match schema: {e}") from e

    async def execute(self, transcript: str, member_name: str) -> ExtractionResult:
        prompt = self.build_prompt(member_name, transcript)
        text = await self._call_llm(prompt)
        return self.parse_response(text)
