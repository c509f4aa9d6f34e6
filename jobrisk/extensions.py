# jobrisk/extensions.py
from __future__ import annotations

import os
from openai import OpenAI

from jobrisk.services.assessment import AssessmentClient
from jobrisk.services.state import AssessmentController, ViewStateRegistry

# Build the OpenAI client once from env vars; the key is never read again later.
# Retries stay off: a failed assessment is resubmitted by the user, not by us.
def init_openai(api_key: str | None = None, timeout: float | None = None) -> OpenAI:
    api_key = api_key or os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("Missing OPENAI_API_KEY")
    if timeout is None:
        return OpenAI(api_key=api_key, max_retries=0)
    return OpenAI(api_key=api_key, max_retries=0, timeout=timeout)

def init_assessment_client(openai_client, config) -> AssessmentClient:
    return AssessmentClient(
        openai_client,
        model=config["OPENAI_MODEL"],
        timeout=config["ASSESSMENT_TIMEOUT_SECONDS"],
        temperature=config["ASSESSMENT_TEMPERATURE"],
        seed=config["ASSESSMENT_SEED"],
        grounded_search=config["GROUNDED_SEARCH"],
    )

def init_view_states(client: AssessmentClient, config) -> ViewStateRegistry:
    strict = config["STRICT_HOST_MATCH"]
    return ViewStateRegistry(
        lambda: AssessmentController(client, strict_host_match=strict),
        max_sessions=config["MAX_SESSIONS"],
    )
