# tests/conftest.py
import copy
import json
from types import SimpleNamespace

import pytest

from jobrisk import create_app

SAMPLE_RESULT = {
    "name": "Jane Doe",
    "role": "Senior Software Engineer & AI Consultant",
    "industry": "Information Technology",
    "overallRisk": "Medium",
    "riskScore": 48,
    "justification": "Routine coding is increasingly automated, but architecture and client work are not.",
    "skillsAnalysis": [
        {"skill": "Python", "automationPotential": 75, "irreplaceableValue": "Judgement on system trade-offs"},
        {"skill": "System Design", "automationPotential": 35, "irreplaceableValue": "Context across teams"},
        {"skill": "Stakeholder Management", "automationPotential": 15, "irreplaceableValue": "Trust and negotiation"},
        {"skill": "Code Review", "automationPotential": 55, "irreplaceableValue": "Mentoring through feedback"},
        {"skill": "Technical Writing", "automationPotential": 62.5, "irreplaceableValue": "Knowing the audience"},
    ],
    "skillsMethodology": "Ranked by frequency in the experience section and seniority of the roles.",
    "humanCentricEdge": {
        "archetype": "The Systems Translator",
        "explanation": "Turns ambiguous business needs into working technical plans.",
    },
    "guidance": {
        "strategicAdvice": "Lean into the parts of the job that need people.",
        "frameworks": [
            {"name": "Skill Stacking", "concept": "Combine rare skills.", "actionItems": ["Learn MLOps", "Write publicly"]},
            {"name": "T-Shaped", "concept": "Go deep in one area, broad elsewhere.", "actionItems": ["Pick a niche"]},
            {"name": "Ikigai", "concept": "Find the overlap of passion and need.", "actionItems": ["List what energises you"]},
        ],
        "positiveActionPlan": ["Update your headline", "Ship one AI side project", "Mentor a junior engineer"],
    },
}


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_RESULT)


class _Responses:
    def __init__(self, owner):
        self._owner = owner

    def create(self, **kwargs):
        text = self._owner._respond("responses", kwargs)
        return SimpleNamespace(output_text=text)


class _Completions:
    def __init__(self, owner):
        self._owner = owner

    def create(self, **kwargs):
        text = self._owner._respond("chat", kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class FakeOpenAI:
    """Stands in for openai.OpenAI: records calls and replays a canned reply."""

    def __init__(self, text=None, error=None, hook=None):
        self.text = json.dumps(SAMPLE_RESULT) if text is None else text
        self.error = error
        self.hook = hook
        self.calls = []
        self.options = []
        self.responses = _Responses(self)
        self.chat = SimpleNamespace(completions=_Completions(self))

    def with_options(self, **kwargs):
        self.options.append(kwargs)
        return self

    def _respond(self, endpoint, kwargs):
        self.calls.append((endpoint, kwargs))
        if self.hook:
            self.hook(kwargs)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def app(fake_openai):
    app = create_app("test", openai_client=fake_openai)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
