"""Metacognitive monitoring and scientific inquiry stores."""

from collections import Counter
from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.models.artifacts import (
    Experiment,
    Hypothesis,
    MetacognitiveData,
    ScientificInquiryData,
)


class MetacognitiveStore(TypedStore[MetacognitiveData]):
    """Monitoring records indexed by task and by assessed knowledge domain."""

    def __init__(self) -> None:
        super().__init__()
        self._by_task: dict[str, set[str]] = {}
        self._by_domain: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: MetacognitiveData) -> None:
        self._add_to(self._by_task, item.task, item_id)
        if item.knowledge_assessment:
            self._add_to(self._by_domain, item.knowledge_assessment.domain, item_id)

    def _unindex(self, item_id: str, item: MetacognitiveData) -> None:
        self._remove_from(self._by_task, item.task, item_id)
        if item.knowledge_assessment:
            self._remove_from(self._by_domain, item.knowledge_assessment.domain, item_id)

    def _reset_indices(self) -> None:
        self._by_task.clear()
        self._by_domain.clear()

    def get_by_monitoring_id(self, monitoring_id: str) -> MetacognitiveData | None:
        matches = self.filter(lambda m: m.monitoring_id == monitoring_id)
        return matches[-1] if matches else None

    def get_by_task(self, task: str) -> list[MetacognitiveData]:
        return self._items_for(self._by_task, task)

    def get_by_stage(self, stage: str) -> list[MetacognitiveData]:
        return self.filter(lambda m: m.stage == stage)

    def get_knowledge_by_domain(self, domain: str) -> list[MetacognitiveData]:
        return self._items_for(self._by_domain, domain)

    def get_assessed_domains(self) -> list[str]:
        return list(self._by_domain)

    def get_low_confidence_sessions(self, threshold: float = 0.5) -> list[MetacognitiveData]:
        return self.filter(lambda m: m.overall_confidence < threshold)

    def get_high_uncertainty_sessions(self, min_areas: int = 3) -> list[MetacognitiveData]:
        return self.filter(lambda m: len(m.uncertainty_areas) >= min_areas)

    def get_active_sessions(self) -> list[MetacognitiveData]:
        return self.filter(lambda m: m.next_assessment_needed)

    def get_confidence_trend(self, monitoring_id: str) -> list[dict[str, Any]]:
        """(iteration, confidence) points for one monitoring id, by iteration."""
        sessions = sorted(
            self.filter(lambda m: m.monitoring_id == monitoring_id), key=lambda m: m.iteration
        )
        return [{"iteration": m.iteration, "confidence": m.overall_confidence} for m in sessions]

    def get_claim_statistics(self) -> dict[str, Any]:
        claims = [claim for m in self.get_all() for claim in m.claims]
        return {
            "total_claims": len(claims),
            "by_status": dict(Counter(c.status for c in claims)),
            "average_confidence": (
                sum(c.confidence_score for c in claims) / len(claims) if claims else 0.0
            ),
            "with_alternatives": sum(1 for c in claims if c.alternative_interpretations),
        }

    def get_statistics(self) -> dict[str, Any]:
        sessions = self.get_all()
        count = len(sessions)
        return {
            "total_sessions": count,
            "active_sessions": len(self.get_active_sessions()),
            "average_confidence": (
                sum(m.overall_confidence for m in sessions) / count if count else 0.0
            ),
            "average_uncertainty_areas": (
                sum(len(m.uncertainty_areas) for m in sessions) / count if count else 0.0
            ),
            "assessed_domains": len(self._by_domain),
            "stage_distribution": dict(Counter(m.stage for m in sessions)),
            "claim_stats": self.get_claim_statistics(),
        }


class ScientificStore(TypedStore[ScientificInquiryData]):
    """Inquiry stages indexed by inquiry, hypothesis and experiment ids."""

    def __init__(self) -> None:
        super().__init__()
        self._by_inquiry: dict[str, set[str]] = {}
        self._by_hypothesis: dict[str, set[str]] = {}
        self._by_experiment: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: ScientificInquiryData) -> None:
        self._add_to(self._by_inquiry, item.inquiry_id, item_id)
        if item.hypothesis:
            self._add_to(self._by_hypothesis, item.hypothesis.hypothesis_id, item_id)
        if item.experiment:
            self._add_to(self._by_experiment, item.experiment.experiment_id, item_id)

    def _unindex(self, item_id: str, item: ScientificInquiryData) -> None:
        self._remove_from(self._by_inquiry, item.inquiry_id, item_id)
        if item.hypothesis:
            self._remove_from(self._by_hypothesis, item.hypothesis.hypothesis_id, item_id)
        if item.experiment:
            self._remove_from(self._by_experiment, item.experiment.experiment_id, item_id)

    def _reset_indices(self) -> None:
        self._by_inquiry.clear()
        self._by_hypothesis.clear()
        self._by_experiment.clear()

    def get_by_inquiry(self, inquiry_id: str) -> list[ScientificInquiryData]:
        return self._items_for(self._by_inquiry, inquiry_id)

    def get_latest_for_inquiry(self, inquiry_id: str) -> ScientificInquiryData | None:
        stages = self.get_by_inquiry(inquiry_id)
        return stages[-1] if stages else None

    def get_by_stage(self, stage: str) -> list[ScientificInquiryData]:
        return self.filter(lambda s: s.stage == stage)

    def get_hypothesis(self, hypothesis_id: str) -> Hypothesis | None:
        """Latest recorded version of a hypothesis."""
        records = self._items_for(self._by_hypothesis, hypothesis_id)
        return records[-1].hypothesis if records else None

    def get_experiment(self, experiment_id: str) -> Experiment | None:
        records = self._items_for(self._by_experiment, experiment_id)
        return records[-1].experiment if records else None

    def get_all_hypotheses(self) -> list[Hypothesis]:
        return [h for h in map(self.get_hypothesis, self._by_hypothesis) if h is not None]

    def get_all_experiments(self) -> list[Experiment]:
        return [e for e in map(self.get_experiment, self._by_experiment) if e is not None]

    def get_hypotheses_by_status(self, status: str) -> list[Hypothesis]:
        return [h for h in self.get_all_hypotheses() if h.status == status]

    def get_successful_experiments(self) -> list[Experiment]:
        return [e for e in self.get_all_experiments() if e.outcome_matched is True]

    def get_experiments_with_surprises(self) -> list[Experiment]:
        return [e for e in self.get_all_experiments() if e.unexpected_observations]

    def get_active_inquiries(self) -> list[ScientificInquiryData]:
        return self.filter(lambda s: s.next_stage_needed)

    def get_completed_inquiries(self) -> list[ScientificInquiryData]:
        return self.filter(lambda s: bool(s.conclusion.strip()))

    def get_hypothesis_evolution(self, hypothesis_id: str) -> list[Hypothesis]:
        """A hypothesis followed by every hypothesis refining it, in order."""
        chain: list[Hypothesis] = []
        current = self.get_hypothesis(hypothesis_id)
        seen: set[str] = set()
        while current is not None and current.hypothesis_id not in seen:
            chain.append(current)
            seen.add(current.hypothesis_id)
            current = next(
                (h for h in self.get_all_hypotheses() if h.refinement_of == current.hypothesis_id),
                None,
            )
        return chain

    def get_statistics(self) -> dict[str, Any]:
        inquiries = self.get_all()
        experiments = self.get_all_experiments()
        return {
            "total_inquiries": len(self._by_inquiry),
            "total_stages": len(inquiries),
            "active_inquiries": len(self.get_active_inquiries()),
            "completed_inquiries": len(self.get_completed_inquiries()),
            "total_hypotheses": len(self._by_hypothesis),
            "total_experiments": len(experiments),
            "successful_experiments": len(self.get_successful_experiments()),
            "stage_distribution": dict(Counter(s.stage for s in inquiries)),
            "hypothesis_status_distribution": dict(
                Counter(h.status for h in self.get_all_hypotheses())
            ),
        }
