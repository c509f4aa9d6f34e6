# jobrisk/services/assessment.py
from __future__ import annotations

import json, logging, re, threading
from typing import Any, Optional
from urllib.parse import urlparse

import openai

from .models import (
    AssessmentRequest, AssessmentResult, SchemaViolation,
    RISK_LEVELS, SKILL_COUNT, FRAMEWORK_COUNT,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_SEED = 42
SCHEMA_NAME = "assessment_result"

# ========= Errors =========
class AssessmentError(Exception):
    """Base class for everything that can go wrong while assessing a profile."""

class ServiceError(AssessmentError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

class ServiceUnreachable(ServiceError):
    pass

class MalformedResponse(AssessmentError):
    pass

class AssessmentCancelled(AssessmentError):
    pass


class CancelToken:
    """Shared flag the caller flips to abandon an in-flight assessment."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AssessmentCancelled("Assessment cancelled by the user")


# ========= Prompt =========
SYSTEM_INSTRUCTION = (
    "You are a top-tier Career Guidance Expert and AI Impact Auditor. You provide clear, "
    "objective assessments. Always extract the person's name and focus on their current or "
    "most recent professional role. Rank skills by frequency, seniority and industry impact. "
    "Answer the same profile the same way every time."
)

PROMPT_TEMPLATE = """
PROFILE TO ANALYZE: {profile_url}

TASK: Produce a rigorous, reproducible and personalised AI risk assessment for this person.

EXTRACTION
1. NAME: the person's full name as shown on the profile.
2. ROLE: a concise description of their current professional identity.
   - Start from the current LinkedIn headline.
   - Refine it with the most recent job titles in the experience section
     (e.g. "Senior Software Engineer & AI Consultant", "Creative Director at X").
3. INDUSTRY: the primary industry of their work history.

SKILLS ANALYSIS
1. Pick the {skill_count} most predominant skills, judged by:
   - how often they appear in experience descriptions,
   - the seniority and responsibility attached to them,
   - their strategic weight for the current title and industry.
2. Order them from most to least prominent.
3. For each skill give its automation potential (0-100) and the human value AI cannot replace.
4. In skillsMethodology, explain in 1-2 sentences how these skills were identified.

CAREER GUIDANCE
1. Give exactly {framework_count} distinct suggestions for career growth.
2. Each one must be built on a named career framework (e.g. Ikigai, Skill Stacking, T-Shaped).
3. Keep the language plain, encouraging and free of jargon.
4. Close with a short, positive action plan of concrete next steps.

EVALUATION RUBRIC
- Cognitive Routine work: HIGH risk
- Social Intelligence: LOW risk
- Creative Synthesis: LOW risk
- Unstructured Physicality: LOW risk

SCORING BANDS
- riskScore 0-30 -> overallRisk "Low"
- riskScore 31-70 -> overallRisk "Medium"
- riskScore 71-100 -> overallRisk "High"

INSTRUCTIONS
- Judge against the capabilities of current AI systems (LLMs, agents).
- Be objective and consistent.
- If a screenshot is attached, treat it as the authoritative view of the profile.
- Reply with JSON that matches the declared schema and nothing else.
""".strip()


def build_prompt(profile_url: str) -> str:
    return PROMPT_TEMPLATE.format(
        profile_url=profile_url,
        skill_count=SKILL_COUNT,
        framework_count=FRAMEWORK_COUNT,
    )


# ========= Response schema =========
def _obj(properties: dict) -> dict:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }

_STRING = {"type": "string"}
_NULLABLE_STRING = {"type": ["string", "null"]}
_PERCENT = {"type": "number", "minimum": 0, "maximum": 100}

RESPONSE_SCHEMA: dict = _obj({
    "name": _NULLABLE_STRING,
    "role": _STRING,
    "industry": _STRING,
    "overallRisk": {"type": "string", "enum": list(RISK_LEVELS)},
    "riskScore": _PERCENT,
    "justification": _STRING,
    "skillsAnalysis": {
        "type": "array",
        "minItems": SKILL_COUNT,
        "maxItems": SKILL_COUNT,
        "items": _obj({
            "skill": _STRING,
            "automationPotential": _PERCENT,
            "irreplaceableValue": _STRING,
        }),
    },
    "skillsMethodology": _NULLABLE_STRING,
    "humanCentricEdge": _obj({
        "archetype": _STRING,
        "explanation": _STRING,
    }),
    "guidance": _obj({
        "strategicAdvice": _STRING,
        "frameworks": {
            "type": "array",
            "minItems": FRAMEWORK_COUNT,
            "maxItems": FRAMEWORK_COUNT,
            "items": _obj({
                "name": _STRING,
                "concept": _STRING,
                "actionItems": {"type": "array", "items": _STRING},
            }),
        },
        "positiveActionPlan": {"type": "array", "items": _STRING},
    }),
})


# ========= Parsing =========
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)

def parse_result(text: Optional[str]) -> AssessmentResult:
    """Decode the reply text into an AssessmentResult or raise MalformedResponse."""
    content = _FENCE.sub("", (text or "").strip())
    if not content:
        raise MalformedResponse("Empty response from the analysis service")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Response is not valid JSON: {e}") from e
    try:
        return AssessmentResult.from_dict(data)
    except SchemaViolation as e:
        raise MalformedResponse(f"Response does not match the schema: {e}") from e


# ========= Client =========
class AssessmentClient:
    """
    Sends one schema-constrained request per assessment and parses the reply.

    With grounded search on, the call goes to the Responses endpoint with the
    web_search tool enabled. Without it, the call goes to Chat Completions,
    which also pins the sampling seed.

    The Responses endpoint takes no seed, so with grounded search on (the
    default) only temperature is pinned and repeated runs can differ. Set
    GROUNDED_SEARCH=0 for temperature 0 plus a fixed seed.
    """

    def __init__(
        self,
        openai_client: Any,
        model: str = DEFAULT_MODEL,
        timeout: float = 90.0,
        temperature: float = 0.0,
        seed: int = DEFAULT_SEED,
        grounded_search: bool = True,
    ) -> None:
        self._client = openai_client
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.seed = seed
        self.grounded_search = grounded_search

    @property
    def endpoint(self) -> str:
        return "responses" if self.grounded_search else "chat"

    # ---- request shaping ----
    def build_request(self, request: AssessmentRequest) -> dict:
        if self.grounded_search:
            return self._responses_request(request)
        return self._chat_request(request)

    def _responses_request(self, request: AssessmentRequest) -> dict:
        content: list[dict] = [{"type": "input_text", "text": build_prompt(request.profile_url)}]
        if request.image is not None:
            content.append({"type": "input_image", "image_url": request.image.data_url})
        return {
            "model": self.model,
            "instructions": SYSTEM_INSTRUCTION,
            "input": [{"role": "user", "content": content}],
            "tools": [{"type": "web_search"}],
            "temperature": self.temperature,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": SCHEMA_NAME,
                    "schema": RESPONSE_SCHEMA,
                    "strict": True,
                }
            },
        }

    def _chat_request(self, request: AssessmentRequest) -> dict:
        content: list[dict] = [{"type": "text", "text": build_prompt(request.profile_url)}]
        if request.image is not None:
            content.append({"type": "image_url", "image_url": {"url": request.image.data_url}})
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": content},
            ],
            "temperature": self.temperature,
            "seed": self.seed,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": SCHEMA_NAME,
                    "schema": RESPONSE_SCHEMA,
                    "strict": True,
                },
            },
        }

    # ---- transport ----
    def _send(self, kwargs: dict) -> str:
        client = self._client.with_options(timeout=self.timeout, max_retries=0)
        try:
            if self.grounded_search:
                resp = client.responses.create(**kwargs)
                return getattr(resp, "output_text", "") or ""
            resp = client.chat.completions.create(**kwargs)
            choice = resp.choices[0] if resp and resp.choices else None
            return (choice.message.content if choice else "") or ""
        except openai.APIConnectionError as e:
            # APITimeoutError is a subclass
            raise ServiceUnreachable(f"Analysis service unreachable: {e}") from e
        except openai.APIStatusError as e:
            raise ServiceError(f"Analysis service rejected the request: {e}", status_code=e.status_code) from e
        except openai.OpenAIError as e:
            raise ServiceError(f"Analysis service error: {e}") from e

    def analyze(self, request: AssessmentRequest, cancel_token: CancelToken | None = None) -> AssessmentResult:
        token = cancel_token or CancelToken()
        token.raise_if_cancelled()

        kwargs = self.build_request(request)
        logger.info(
            "assessment: calling %s (%s) for host=%s image=%s",
            self.model, self.endpoint, urlparse(request.profile_url).hostname, request.image is not None,
        )
        text = self._send(kwargs)

        # a cancelled call may still complete; its answer is dropped
        token.raise_if_cancelled()
        result = parse_result(text)
        logger.info("assessment: %s risk (%s) for role=%r", result.overall_risk, result.risk_score, result.role)
        return result
