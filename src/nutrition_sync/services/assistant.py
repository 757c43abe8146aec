"""Nutrition assistant exchange and reply parsing."""

import base64
import json
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from nutrition_sync.domain.chat import AssistantReply, ChatMessage
from nutrition_sync.domain.logs import DailyLog, History, LogPatch, Targets

logger = logging.getLogger(__name__)

WORKOUT_REVIEW_DAYS = 30
WORKOUT_REVIEW_FALLBACK = (
    "The coach could not review your workouts right now. "
    "Make sure you have logged enough sessions and try again."
)

COACH_PROMPT = (
    "You are a smart nutrition assistant that tracks calories and macros through "
    "the day from food photos or text the user sends. Be friendly and motivating. "
    "Estimate nutrients carefully (calories, protein, carbs, fat, fiber, sugar, "
    "sodium). When the user sends a photo, describe what you see and your "
    "estimate for each part."
)

PATCH_INSTRUCTION = """
IMPORTANT SYSTEM INSTRUCTION FOR DATA PARSING:
At the very end of your response you MUST append a JSON block containing the
*updated cumulative* daily totals AND supplement status, in exactly this format:
```json
{
  "dailyTotals": {
    "calories": 1200,
    "protein": 80,
    "carbs": 150,
    "fat": 40,
    "fiber": 20,
    "sugar": 30,
    "sodium": 1500
  },
  "supplements": {
    "creatine": true,
    "multivitamin": false
  }
}
```
Do not include any other text after this JSON block.
"""

TRAINER_PROMPT = (
    "You are a professional personal trainer. Review the user's workout log "
    "and cover: progressive overload in weights or reps, muscle group balance, "
    "whether cardio volume is sufficient, weekly consistency, and one concrete "
    "change that would improve results. Be energetic and professional."
)

_JSON_BLOCK = re.compile(r"```json\s*([\s\S]*?)\s*```")


class AssistantClient(Protocol):
    """Interface for the language model behind the assistant."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        messages: list[ChatMessage],
    ) -> str:
        """Return the model's reply text for a conversation."""


@dataclass
class AssistantService:
    """Builds assistant prompts and turns replies into log patches."""

    client: AssistantClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze_food(  # noqa: PLR0913
        self,
        conversation: list[ChatMessage],
        text: str,
        image: bytes | None,
        targets: Targets,
        log: DailyLog,
        today: date | None = None,
    ) -> AssistantReply:
        """Send a user message with the day's context and parse the reply."""
        instructions = build_food_instructions(targets, log, today or date.today())
        messages = [
            *conversation,
            ChatMessage(id="pending", role="user", text=text, image=image),
        ]
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=instructions,
            messages=messages,
        )
        return parse_assistant_reply(raw)

    async def analyze_workouts(
        self, history: History, today: date | None = None
    ) -> str:
        """Ask for a coaching review of the workouts of the last 30 days."""
        summary = workout_summary(history, WORKOUT_REVIEW_DAYS, today or date.today())
        prompt = (
            f"Here is my workout log for the last {WORKOUT_REVIEW_DAYS} days:\n"
            f"{json.dumps(summary)}"
        )
        try:
            reply = await self.client.complete(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=TRAINER_PROMPT,
                messages=[ChatMessage(id="review", role="user", text=prompt)],
            )
        except Exception:
            logger.exception("Workout review request failed")
            return WORKOUT_REVIEW_FALLBACK
        return reply or WORKOUT_REVIEW_FALLBACK


def build_food_instructions(targets: Targets, log: DailyLog, today: date) -> str:
    """Return system instructions carrying the day's targets and totals."""
    context = (
        "[SYSTEM CONTEXT]\n"
        f"Current User Targets: {targets.model_dump_json(by_alias=True)}\n"
        "Current Cumulative Daily Log: "
        f"{log.model_dump_json(by_alias=True, exclude_none=True)}\n"
        f"Date: {today.isoformat()}"
    )
    return f"{COACH_PROMPT}\n{PATCH_INSTRUCTION}\n{context}"


def parse_assistant_reply(text: str) -> AssistantReply:
    """Split a reply into display text and an optional log patch.

    A missing JSON block yields no patch. A malformed block is dropped and the
    reply text is returned unchanged.
    """
    match = _JSON_BLOCK.search(text)
    if match is None:
        return AssistantReply(text=text)
    try:
        patch = _patch_from_payload(json.loads(match.group(1)))
    except ValueError:
        logger.warning("Discarding malformed data block in assistant reply")
        return AssistantReply(text=text)
    cleaned = (text[: match.start()] + text[match.end() :]).strip()
    return AssistantReply(text=cleaned, patch=patch)


def _patch_from_payload(payload: object) -> LogPatch:
    if not isinstance(payload, dict):
        raise ValueError("Assistant data block must be a JSON object")
    totals = payload.get("dailyTotals") or {}
    if not isinstance(totals, dict):
        raise ValueError("dailyTotals must be a JSON object")
    data: dict[str, object] = dict(totals)
    supplements = payload.get("supplements")
    if isinstance(supplements, dict):
        data["supplements"] = supplements
    return LogPatch.model_validate(data)


def workout_summary(
    history: History, days: int, today: date
) -> list[dict[str, object]]:
    """Return completed sets of workouts in the ``days`` calendar days up to today."""
    first_day = today - timedelta(days=days - 1)
    summary: list[dict[str, object]] = []
    for day_key in sorted(history):
        try:
            day = date.fromisoformat(day_key)
        except ValueError:
            continue
        if not first_day <= day <= today:
            continue
        log = history[day_key]
        if not log.has_workout or log.workout is None:
            continue
        exercises = []
        for exercise in log.workout.exercises:
            sets = [
                item.model_dump(by_alias=True, exclude={"id", "completed"})
                for item in exercise.sets
                if item.completed
            ]
            exercises.append(
                {"name": exercise.name, "muscle": exercise.muscle, "sets": sets}
            )
        summary.append({"date": day_key, "exercises": exercises})
    return summary


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
