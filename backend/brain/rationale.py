"""Explains why a free resource is a fair substitute for a paid-resource topic."""

from pydantic import ValidationError

from brain.client import complete, parse_json_response, AIResponseError
from brain.schemas import RationaleRequest, RationaleResponse


def explain_resource_matching_rationale(data: RationaleRequest) -> RationaleResponse:
    prompt = f"""You are an expert at explaining why a free resource is a good substitute for content found in paid educational resources.

Given the following topic from a paid resource:
{data.topic}

And the following free resource link:
{data.resource_link}

Explain in one sentence why this free resource is a good substitute for the topic in the paid resource.
Focus on the specific educational content of the free resource.

Return ONLY JSON: {{"rationale": "<one sentence>"}}"""

    raw = complete(prompt, max_tokens=300)
    try:
        return RationaleResponse.model_validate(parse_json_response(raw, expect="object"))
    except ValidationError as exc:
        raise AIResponseError("AI returned an invalid rationale") from exc
