# jobrisk/services/models.py
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Literal, Optional

RiskLevel = Literal["Low", "Medium", "High"]
RISK_LEVELS = ("Low", "Medium", "High")

SKILL_COUNT = 5
FRAMEWORK_COUNT = 3


class SchemaViolation(ValueError):
    """A payload does not match the assessment response contract."""


# ---------- field helpers ----------

def _field(data: dict, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise SchemaViolation(f"'{where.rstrip('.') or 'response'}' must be an object")
    if key not in data or data[key] is None:
        raise SchemaViolation(f"missing required field '{where}{key}'")
    return data[key]

def _str(data: dict, key: str, where: str = "") -> str:
    val = _field(data, key, where)
    if not isinstance(val, str):
        raise SchemaViolation(f"'{where}{key}' must be a string")
    return val

def _opt_str(data: dict, key: str, where: str = "") -> Optional[str]:
    val = data.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise SchemaViolation(f"'{where}{key}' must be a string or null")
    return val

def _score(data: dict, key: str, where: str = "") -> float:
    val = _field(data, key, where)
    # bool is an int subclass; reject it explicitly
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise SchemaViolation(f"'{where}{key}' must be a number")
    if not 0 <= val <= 100:
        raise SchemaViolation(f"'{where}{key}' must lie in [0, 100], got {val}")
    return val

def _list(data: dict, key: str, where: str = "", size: int | None = None) -> list:
    val = _field(data, key, where)
    if not isinstance(val, list):
        raise SchemaViolation(f"'{where}{key}' must be an array")
    if size is not None and len(val) != size:
        raise SchemaViolation(f"'{where}{key}' must hold exactly {size} items, got {len(val)}")
    return val

def _str_list(data: dict, key: str, where: str = "") -> tuple[str, ...]:
    items = _list(data, key, where)
    if not all(isinstance(i, str) for i in items):
        raise SchemaViolation(f"'{where}{key}' must be an array of strings")
    return tuple(items)


# ---------- request side ----------

@dataclass(frozen=True)
class ImageUpload:
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def data_url(self) -> str:
        b64 = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AssessmentRequest:
    profile_url: str
    image: Optional[ImageUpload] = None


# ---------- response side ----------

@dataclass(frozen=True)
class SkillImpact:
    skill: str
    automation_potential: float
    irreplaceable_value: str

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "SkillImpact":
        return cls(
            skill=_str(data, "skill", where),
            automation_potential=_score(data, "automationPotential", where),
            irreplaceable_value=_str(data, "irreplaceableValue", where),
        )

    def to_dict(self) -> dict:
        return {
            "skill": self.skill,
            "automationPotential": self.automation_potential,
            "irreplaceableValue": self.irreplaceable_value,
        }


@dataclass(frozen=True)
class HumanCentricEdge:
    archetype: str
    explanation: str

    def to_dict(self) -> dict:
        return {"archetype": self.archetype, "explanation": self.explanation}


@dataclass(frozen=True)
class CareerFramework:
    name: str
    concept: str
    action_items: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "CareerFramework":
        return cls(
            name=_str(data, "name", where),
            concept=_str(data, "concept", where),
            action_items=_str_list(data, "actionItems", where),
        )

    def to_dict(self) -> dict:
        return {"name": self.name, "concept": self.concept, "actionItems": list(self.action_items)}


@dataclass(frozen=True)
class Guidance:
    strategic_advice: str
    frameworks: tuple[CareerFramework, ...]
    positive_action_plan: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "strategicAdvice": self.strategic_advice,
            "frameworks": [f.to_dict() for f in self.frameworks],
            "positiveActionPlan": list(self.positive_action_plan),
        }


@dataclass(frozen=True)
class AssessmentResult:
    role: str
    industry: str
    overall_risk: RiskLevel
    risk_score: float
    justification: str
    skills_analysis: tuple[SkillImpact, ...]
    human_centric_edge: HumanCentricEdge
    guidance: Guidance
    name: Optional[str] = None
    skills_methodology: Optional[str] = None

    @property
    def initial(self) -> str:
        return (self.name or self.role or "?").strip()[:1].upper() or "?"

    @classmethod
    def from_dict(cls, data: Any) -> "AssessmentResult":
        """
        Build a result from the decoded JSON reply. Raises SchemaViolation when
        a required field is absent, mistyped, out of range, or an array has the
        wrong number of entries.
        """
        if not isinstance(data, dict):
            raise SchemaViolation("response must be a JSON object")

        level = _str(data, "overallRisk")
        if level not in RISK_LEVELS:
            raise SchemaViolation(f"'overallRisk' must be one of {', '.join(RISK_LEVELS)}, got {level!r}")

        skills = _list(data, "skillsAnalysis", size=SKILL_COUNT)

        edge = _field(data, "humanCentricEdge", "")
        if not isinstance(edge, dict):
            # the bare-string form belongs to a retired schema revision
            raise SchemaViolation("'humanCentricEdge' must be an object with archetype and explanation")

        guidance = _field(data, "guidance", "")
        frameworks = _list(guidance, "frameworks", "guidance.", size=FRAMEWORK_COUNT)

        return cls(
            name=_opt_str(data, "name"),
            role=_str(data, "role"),
            industry=_str(data, "industry"),
            overall_risk=level,  # type: ignore[arg-type]
            risk_score=_score(data, "riskScore"),
            justification=_str(data, "justification"),
            skills_analysis=tuple(
                SkillImpact.from_dict(s, f"skillsAnalysis[{i}].") for i, s in enumerate(skills)
            ),
            skills_methodology=_opt_str(data, "skillsMethodology"),
            human_centric_edge=HumanCentricEdge(
                archetype=_str(edge, "archetype", "humanCentricEdge."),
                explanation=_str(edge, "explanation", "humanCentricEdge."),
            ),
            guidance=Guidance(
                strategic_advice=_str(guidance, "strategicAdvice", "guidance."),
                frameworks=tuple(
                    CareerFramework.from_dict(f, f"guidance.frameworks[{i}].") for i, f in enumerate(frameworks)
                ),
                positive_action_plan=_str_list(guidance, "positiveActionPlan", "guidance."),
            ),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "role": self.role,
            "industry": self.industry,
            "overallRisk": self.overall_risk,
            "riskScore": self.risk_score,
            "justification": self.justification,
            "skillsAnalysis": [s.to_dict() for s in self.skills_analysis],
            "skillsMethodology": self.skills_methodology,
            "humanCentricEdge": self.human_centric_edge.to_dict(),
            "guidance": self.guidance.to_dict(),
        }
