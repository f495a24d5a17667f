"""
Reasoning artifact models.

One frozen record type per reasoning kind. Artifacts are never mutated in
place; stores replace them through an explicit update.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(str, Enum):
    """Tag identifying which reasoning kind an artifact belongs to."""

    THOUGHT = "thought"
    MENTAL_MODEL = "mental_model"
    DEBUGGING = "debugging"
    COLLABORATIVE = "collaborative"
    DECISION = "decision"
    METACOGNITIVE = "metacognitive"
    SCIENTIFIC = "scientific"
    CREATIVE = "creative"
    SYSTEMS = "systems"
    VISUAL = "visual"
    ARGUMENT = "argument"
    SOCRATIC = "socratic"


class Artifact(BaseModel):
    """Base for every stored reasoning record."""

    model_config = ConfigDict(frozen=True, extra="allow")


# ═══════════════════════════════════════════════════════════
# SEQUENTIAL THINKING
# ═══════════════════════════════════════════════════════════


class ThoughtData(Artifact):
    """One step of a sequential thinking chain."""

    thought: str
    thought_number: int = Field(..., ge=1)
    total_thoughts: int = Field(..., ge=1)
    next_thought_needed: bool = False
    is_revision: bool = False
    revises_thought: int | None = None
    branch_from_thought: int | None = None
    branch_id: str | None = None
    needs_more_thoughts: bool = False


# ═══════════════════════════════════════════════════════════
# MENTAL MODELS / DEBUGGING
# ═══════════════════════════════════════════════════════════


class MentalModelData(Artifact):
    """Application of a named mental model to a problem."""

    model_config = ConfigDict(frozen=True, extra="allow", protected_namespaces=())

    model_name: str
    problem: str
    steps: list[str] = Field(default_factory=list)
    reasoning: str = ""
    conclusion: str = ""


class DebuggingSession(Artifact):
    """A debugging approach applied to an issue."""

    approach_name: str
    issue: str
    steps: list[str] = Field(default_factory=list)
    findings: str = ""
    resolution: str = ""


# ═══════════════════════════════════════════════════════════
# COLLABORATIVE REASONING
# ═══════════════════════════════════════════════════════════


class Persona(BaseModel):
    id: str
    name: str
    expertise: list[str] = Field(default_factory=list)
    background: str = ""
    perspective: str = ""


class Contribution(BaseModel):
    persona_id: str
    content: str
    type: str = "observation"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class Disagreement(BaseModel):
    topic: str
    positions: list[dict[str, Any]] = Field(default_factory=list)
    resolution: str | None = None


class CollaborativeSession(Artifact):
    """Multi-persona reasoning session."""

    topic: str
    session_id: str
    stage: str = "problem-definition"
    personas: list[Persona] = Field(default_factory=list)
    contributions: list[Contribution] = Field(default_factory=list)
    active_persona_id: str | None = None
    iteration: int = 0
    consensus_points: list[str] = Field(default_factory=list)
    disagreements: list[Disagreement] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    next_contribution_needed: bool = False


# ═══════════════════════════════════════════════════════════
# DECISION FRAMEWORK
# ═══════════════════════════════════════════════════════════


class DecisionOption(BaseModel):
    id: str
    name: str
    description: str = ""


class DecisionCriterion(BaseModel):
    id: str
    name: str
    weight: float = 1.0
    description: str = ""


class DecisionData(Artifact):
    """Structured decision analysis."""

    decision_statement: str
    decision_id: str
    analysis_type: str = "weighted-criteria"
    stage: str = "problem-definition"
    options: list[DecisionOption] = Field(default_factory=list)
    criteria: list[DecisionCriterion] = Field(default_factory=list)
    criteria_evaluations: list[dict[str, Any]] = Field(default_factory=list)
    stakeholders: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    possible_outcomes: list[dict[str, Any]] = Field(default_factory=list)
    information_gaps: list[dict[str, Any]] = Field(default_factory=list)
    sensitivity_insights: list[str] = Field(default_factory=list)
    expected_values: dict[str, float] | None = None
    multi_criteria_scores: dict[str, float] | None = None
    recommendation: str | None = None
    iteration: int = 0
    next_stage_needed: bool = False


# ═══════════════════════════════════════════════════════════
# METACOGNITIVE MONITORING
# ═══════════════════════════════════════════════════════════


class KnowledgeAssessment(BaseModel):
    domain: str
    knowledge_level: str = "moderate"
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    supporting_evidence: str = ""
    known_limitations: list[str] = Field(default_factory=list)


class ClaimAssessment(BaseModel):
    claim: str
    status: str = "inference"
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    evidence_basis: str = ""
    alternative_interpretations: list[str] = Field(default_factory=list)


class MetacognitiveData(Artifact):
    """Self-assessment of a reasoning task."""

    task: str
    monitoring_id: str
    stage: str = "knowledge-assessment"
    overall_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    uncertainty_areas: list[str] = Field(default_factory=list)
    recommended_approach: str = ""
    knowledge_assessment: KnowledgeAssessment | None = None
    claims: list[ClaimAssessment] = Field(default_factory=list)
    iteration: int = 0
    next_assessment_needed: bool = False


# ═══════════════════════════════════════════════════════════
# SCIENTIFIC METHOD
# ═══════════════════════════════════════════════════════════


class Hypothesis(BaseModel):
    hypothesis_id: str
    statement: str
    variables: list[dict[str, Any]] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    domain: str = ""
    iteration: int = 0
    status: str = "proposed"
    refinement_of: str | None = None


class Experiment(BaseModel):
    experiment_id: str
    hypothesis_id: str
    design: str
    methodology: str = ""
    predictions: list[dict[str, Any]] = Field(default_factory=list)
    controls: list[str] = Field(default_factory=list)
    results: str | None = None
    outcome_matched: bool | None = None
    unexpected_observations: list[str] = Field(default_factory=list)


class ScientificInquiryData(Artifact):
    """One stage of a scientific inquiry."""

    inquiry_id: str
    stage: str = "observation"
    observation: str = ""
    question: str = ""
    hypothesis: Hypothesis | None = None
    experiment: Experiment | None = None
    analysis: str = ""
    conclusion: str = ""
    iteration: int = 0
    next_stage_needed: bool = False


# ═══════════════════════════════════════════════════════════
# CREATIVE / SYSTEMS THINKING
# ═══════════════════════════════════════════════════════════


class CreativeData(Artifact):
    """Idea generation session."""

    prompt: str
    session_id: str
    ideas: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    connections: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    iteration: int = 0
    next_idea_needed: bool = False


class FeedbackLoop(BaseModel):
    components: list[str] = Field(default_factory=list)
    type: Literal["positive", "negative"]
    description: str = ""


class SystemRelationship(BaseModel):
    source: str
    target: str
    type: str = "influences"
    strength: float | None = None


class SystemsData(Artifact):
    """Systems thinking analysis."""

    system: str
    session_id: str
    components: list[str] = Field(default_factory=list)
    relationships: list[SystemRelationship] = Field(default_factory=list)
    feedback_loops: list[FeedbackLoop] = Field(default_factory=list)
    emergent_properties: list[str] = Field(default_factory=list)
    leverage_points: list[str] = Field(default_factory=list)
    iteration: int = 0
    next_analysis_needed: bool = False


# ═══════════════════════════════════════════════════════════
# VISUAL REASONING
# ═══════════════════════════════════════════════════════════


class VisualElement(BaseModel):
    id: str
    type: str = "node"  # node, edge, container, annotation
    label: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)
    source: str | None = None
    target: str | None = None
    contains: list[str] = Field(default_factory=list)


class VisualData(Artifact):
    """A single operation on a diagram."""

    diagram_id: str
    diagram_type: str = "graph"
    operation: Literal["create", "update", "delete", "transform", "observe"] = "create"
    elements: list[VisualElement] = Field(default_factory=list)
    transformation_type: str | None = None
    iteration: int = 0
    observation: str = ""
    insight: str = ""
    hypothesis: str = ""
    next_operation_needed: bool = False


# ═══════════════════════════════════════════════════════════
# ARGUMENTATION
# ═══════════════════════════════════════════════════════════


class ArgumentData(Artifact):
    """Structured argument."""

    claim: str
    premises: list[str] = Field(default_factory=list)
    conclusion: str = ""
    argument_type: str = "deductive"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    session_id: str | None = None
    iteration: int = 1
    next_argument_needed: bool = False


class SocraticData(ArgumentData):
    """Socratic dialogue step; an argument with a guiding question."""

    question: str
    stage: str = "clarification"


# Kind -> record type
ARTIFACT_MODELS: dict[ArtifactKind, type[Artifact]] = {
    ArtifactKind.THOUGHT: ThoughtData,
    ArtifactKind.MENTAL_MODEL: MentalModelData,
    ArtifactKind.DEBUGGING: DebuggingSession,
    ArtifactKind.COLLABORATIVE: CollaborativeSession,
    ArtifactKind.DECISION: DecisionData,
    ArtifactKind.METACOGNITIVE: MetacognitiveData,
    ArtifactKind.SCIENTIFIC: ScientificInquiryData,
    ArtifactKind.CREATIVE: CreativeData,
    ArtifactKind.SYSTEMS: SystemsData,
    ArtifactKind.VISUAL: VisualData,
    ArtifactKind.ARGUMENT: ArgumentData,
    ArtifactKind.SOCRATIC: SocraticData,
}

# Kind -> tag used in session export records
EXPORT_TAGS: dict[ArtifactKind, str] = {
    ArtifactKind.THOUGHT: "sequential",
    ArtifactKind.MENTAL_MODEL: "mental-model",
    ArtifactKind.DEBUGGING: "debugging",
    ArtifactKind.COLLABORATIVE: "collaborative",
    ArtifactKind.DECISION: "decision",
    ArtifactKind.METACOGNITIVE: "metacognitive",
    ArtifactKind.SCIENTIFIC: "scientific",
    ArtifactKind.CREATIVE: "creative",
    ArtifactKind.SYSTEMS: "systems",
    ArtifactKind.VISUAL: "visual",
    ArtifactKind.ARGUMENT: "argument",
    ArtifactKind.SOCRATIC: "socratic",
}

# Kind -> reasoning tool reported in session statistics
TOOL_NAMES: dict[ArtifactKind, str] = {
    ArtifactKind.THOUGHT: "sequential-thinking",
    ArtifactKind.MENTAL_MODEL: "mental-models",
    ArtifactKind.DEBUGGING: "debugging",
    ArtifactKind.COLLABORATIVE: "collaborative-reasoning",
    ArtifactKind.DECISION: "decision-framework",
    ArtifactKind.METACOGNITIVE: "metacognitive-monitoring",
    ArtifactKind.SCIENTIFIC: "scientific-method",
    ArtifactKind.CREATIVE: "creative-thinking",
    ArtifactKind.SYSTEMS: "systems-thinking",
    ArtifactKind.VISUAL: "visual-reasoning",
    ArtifactKind.ARGUMENT: "argumentation",
    ArtifactKind.SOCRATIC: "socratic-method",
}

# Fields that tie an artifact to a wider reasoning session
SESSION_KEY_FIELDS = ("session_id", "decision_id", "monitoring_id", "inquiry_id", "diagram_id")


def kind_for_export_tag(tag: str) -> ArtifactKind | None:
    """Reverse lookup of EXPORT_TAGS."""
    for kind, value in EXPORT_TAGS.items():
        if value == tag:
            return kind
    return None
