"""Per-topic study task generation: turns a topic plus its assigned dates into daily tasks."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from brain.client import complete, parse_json_response, AIResponseError
from brain.schemas import GenerateStudyTasksInput, GenerateStudyTasksOutput

logger = logging.getLogger(__name__)

MAX_TASKS_PER_DAY = 3


def _build_study_tasks_prompt(data: GenerateStudyTasksInput) -> str:
    dates_str = ", ".join(data.study_dates)

    if data.expert_resources:
        resource_lines = "\n".join(
            f"- Type: {r.type}, URL: {r.url}, Description: {r.description}"
            for r in data.expert_resources
        )
        resources_block = f"""### EXPERT CONTEXT ###
You have been provided with a library of expert-vetted resources. You MUST use these links when suggesting tasks.
Do not use the same link for every task. Assign a mix of videos, practice sets, and guides from the list below
to create a professional study roadmap.

Available Resources:
{resource_lines}
###################"""
    else:
        resources_block = f"""### NO EXPERT CONTEXT ###
You have not been provided with specific resources. Suggest generic, high-quality free resources instead,
e.g. searching for '{data.topic} practice problems' on Khan Academy or a video from the official College Board
YouTube channel. DO NOT invent URLs.
###################"""

    return f"""RETURN ONLY VALID JSON — NO TEXT BEFORE OR AFTER.

You are an expert AI Tutor creating a study plan for the '{data.exam_type}' exam.
Your current task is to generate actionable study items for the topic: '{data.topic}'.

The student has the following dates to study this topic: {dates_str}.
You MUST generate a plan for each of these dates.

{resources_block}

For each study date, create 1 to {MAX_TASKS_PER_DAY} specific, actionable tasks.
A good task is 'Watch the video on Thermodynamics on Khan Academy and take notes' or
'Complete 10 practice problems on Right Triangles'. A bad task is 'Study Geometry'.

RETURN FORMAT:
{{
  "study_days": [
    {{"date": "<YYYY-MM-DD>", "tasks": [{{"description": "<string>"}}]}}
  ]
}}"""


def generate_study_tasks_for_topic(data: GenerateStudyTasksInput) -> GenerateStudyTasksOutput:
    """Ask the model for 1-3 tasks per study date of one topic.

    Days the model invents (dates we did not send) are dropped; days with more
    than MAX_TASKS_PER_DAY tasks are cut down. Raises AIResponseError when the
    reply is not valid or covers none of the requested dates.
    """
    logger.info("Generating AI tasks for topic: %s (%d dates)", data.topic, len(data.study_dates))
    raw = complete(_build_study_tasks_prompt(data))
    payload = parse_json_response(raw, expect="object")

    # Tolerate camelCase from the model
    if "study_days" not in payload and "studyDays" in payload:
        payload["study_days"] = payload.pop("studyDays")

    try:
        output = GenerateStudyTasksOutput.model_validate(payload)
    except ValidationError as exc:
        raise AIResponseError("AI failed to generate study tasks.") from exc

    requested = set(data.study_dates)
    kept = []
    for day in output.study_days:
        if day.date not in requested:
            logger.warning("Dropping AI day %s for topic %s: not a requested date", day.date, data.topic)
            continue
        if not day.tasks:
            continue
        day.tasks = day.tasks[:MAX_TASKS_PER_DAY]
        kept.append(day)

    if not kept:
        raise AIResponseError("AI failed to generate study tasks.")

    logger.info("Generated %d day(s) of tasks for %s", len(kept), data.topic)
    return GenerateStudyTasksOutput(study_days=kept)
