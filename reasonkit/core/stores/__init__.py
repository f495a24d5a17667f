"""Typed artifact stores, one per reasoning kind."""

from reasonkit.core.stores.base import TypedStore
from reasonkit.core.stores.collaborative_store import CollaborativeStore, DecisionStore
from reasonkit.core.stores.creative_store import CreativeStore, SystemsStore
from reasonkit.core.stores.inquiry_store import MetacognitiveStore, ScientificStore
from reasonkit.core.stores.mental_model_store import DebuggingStore, MentalModelStore
from reasonkit.core.stores.thought_store import ThoughtStore
from reasonkit.core.stores.visual_store import ArgumentStore, VisualStore
from reasonkit.models.artifacts import ArtifactKind

# Kind -> store class; Socratic steps share the argument store shape
STORE_TYPES: dict[ArtifactKind, type[TypedStore]] = {
    ArtifactKind.THOUGHT: ThoughtStore,
    ArtifactKind.MENTAL_MODEL: MentalModelStore,
    ArtifactKind.DEBUGGING: DebuggingStore,
    ArtifactKind.COLLABORATIVE: CollaborativeStore,
    ArtifactKind.DECISION: DecisionStore,
    ArtifactKind.METACOGNITIVE: MetacognitiveStore,
    ArtifactKind.SCIENTIFIC: ScientificStore,
    ArtifactKind.CREATIVE: CreativeStore,
    ArtifactKind.SYSTEMS: SystemsStore,
    ArtifactKind.VISUAL: VisualStore,
    ArtifactKind.ARGUMENT: ArgumentStore,
    ArtifactKind.SOCRATIC: ArgumentStore,
}

__all__ = [
    "STORE_TYPES",
    "TypedStore",
    "ThoughtStore",
    "MentalModelStore",
    "DebuggingStore",
    "CollaborativeStore",
    "DecisionStore",
    "MetacognitiveStore",
    "ScientificStore",
    "CreativeStore",
    "SystemsStore",
    "VisualStore",
    "ArgumentStore",
]
