"""Confidence scoring for AI-generated artifacts."""

import copy
from typing import Dict, Iterable, List, Optional

import structlog

from ..models.confidence import (
    AggregateConfidence,
    ConfidenceAssessment,
    ConfidenceFactors,
    ConfidenceTier,
    SectionInput,
)
from ..utils.math_utils import clamp, round_half_up

log = structlog.get_logger()

DEFAULT_WEIGHTS = {
    'input_completeness': 0.3,
    'ai_self_assessment': 0.4,
    'pattern_match': 0.3,
}

# Share of input completeness contributed by each optional field
FIELD_WEIGHTS = (
    ('description', 0.3),
    ('examples', 0.2),
    ('constraints', 0.2),
    ('context', 0.15),
    ('requirements', 0.15),
)

MISSING_FIELD_QUESTIONS = {
    'description': "Can you provide a fuller description of the {section}?",
    'examples': "Are there specific examples or use cases for the {section} you can share?",
    'constraints': "What constraints (technical, budget, timeline) apply to the {section}?",
    'context': "What background context should inform the {section}?",
    'requirements': "Which concrete requirements must the {section} satisfy?",
}

# Below this a factor counts as weak enough to ask about
WEAK_FACTOR = 0.5

# Hard ceiling on clarifying questions; config may only lower it
MAX_QUESTIONS = 5


def calculate_input_completeness(section_input: SectionInput) -> float:
    """Score 0-1 from which optional input fields were provided."""
    score = sum(
        weight for name, weight in FIELD_WEIGHTS
        if _is_present(getattr(section_input, name))
    )
    return min(1.0, round(score, 4))


def missing_fields(section_input: SectionInput) -> List[str]:
    """Optional input fields left empty, most valuable first."""
    return [name for name, _ in FIELD_WEIGHTS if not _is_present(getattr(section_input, name))]


def calculate_pattern_match(section_input: SectionInput) -> float:
    """Heuristic structural match between a section and well-formed sections of its kind."""
    score = 0.5
    name = section_input.section_name.lower()
    description = (section_input.description or '').lower()

    if 'overview' in name or 'description' in name:
        # Problem, solution, value
        if 'problem' in description or 'challenge' in description:
            score += 0.1
        if 'solution' in description or 'will' in description:
            score += 0.1
        if 'value' in description or 'benefit' in description:
            score += 0.1

    if 'feature' in name or 'requirement' in name:
        if section_input.examples:
            score += 0.15
        if section_input.constraints:
            score += 0.1

    if 'user' in name or 'persona' in name:
        if len(description) > 200:
            score += 0.2

    return min(1.0, score)


class ConfidenceScorer:
    """Combines input completeness, AI self-assessment and pattern match.

    The AI self-assessment carries the largest default weight but is never
    used alone. Thresholds and weights come from the ``confidence`` config
    section so review gating can change without code changes.
    """

    def __init__(self, config: Optional[dict] = None):
        """Initialize scorer with configuration."""
        self.config = config or {}
        self._apply(self.config.get('confidence', {}))

    def _apply(self, confidence_config: dict) -> None:
        self.confidence_config = copy.deepcopy(confidence_config)
        self.warning_threshold = confidence_config.get('warning_threshold', 70)
        self.error_threshold = confidence_config.get('error_threshold', 50)
        self.weights = {**DEFAULT_WEIGHTS, **confidence_config.get('weights', {})}
        self.max_questions = confidence_config.get('max_questions', 5)
        self.neutral_self_assessment = confidence_config.get('neutral_self_assessment', 0.5)

    def update_config(self, **overrides) -> None:
        """Override confidence settings (thresholds, weights, ...) in place."""
        merged = copy.deepcopy(self.confidence_config)
        for key, value in overrides.items():
            if key == 'weights':
                merged['weights'] = {**merged.get('weights', {}), **value}
            else:
                merged[key] = value
        self._apply(merged)

    def get_tier(self, score: float) -> ConfidenceTier:
        """Calculate confidence tier from score."""
        if score >= self.warning_threshold:
            return ConfidenceTier.HIGH
        if score >= self.error_threshold:
            return ConfidenceTier.MEDIUM
        return ConfidenceTier.LOW

    def calculate_weighted_score(self, factors: ConfidenceFactors) -> int:
        """Weighted mean of the factors scaled to 0-100."""
        w = self.weights
        total_weight = w['input_completeness'] + w['ai_self_assessment'] + w['pattern_match']
        if total_weight <= 0:
            return 0

        weighted_sum = (
            factors.input_completeness * w['input_completeness']
            + factors.ai_self_assessment * w['ai_self_assessment']
            + factors.pattern_match * w['pattern_match']
        )
        return round_half_up(100 * weighted_sum / total_weight)

    def calculate_section_confidence(self, section_input: SectionInput) -> ConfidenceAssessment:
        """Calculate confidence for a single section."""
        if section_input.ai_self_assessment is None:
            ai_self_assessment = self.neutral_self_assessment
        else:
            ai_self_assessment = clamp(section_input.ai_self_assessment)

        if section_input.pattern_match is None:
            pattern_match = calculate_pattern_match(section_input)
        else:
            pattern_match = clamp(section_input.pattern_match)

        factors = ConfidenceFactors(
            input_completeness=calculate_input_completeness(section_input),
            ai_self_assessment=ai_self_assessment,
            pattern_match=pattern_match,
        )

        score = self.calculate_weighted_score(factors)
        tier = self.get_tier(score)
        needs_review = score < self.warning_threshold

        # Without a model signal confidence tops out at medium
        if section_input.ai_self_assessment is None:
            if tier == ConfidenceTier.HIGH:
                tier = ConfidenceTier.MEDIUM
            needs_review = True

        questions = self.generate_clarifying_questions(section_input, factors, tier)

        assessment = ConfidenceAssessment(
            section_id=section_input.section_id,
            section_name=section_input.section_name,
            score=score,
            tier=tier,
            factors=factors,
            reasoning=section_input.reasoning or self._reasoning(factors, section_input),
            needs_review=needs_review,
            clarifying_questions=questions or None,
        )

        log.debug(
            "Section confidence calculated",
            section_id=section_input.section_id,
            score=score,
            tier=tier.value,
            needs_review=assessment.needs_review,
        )
        return assessment

    def generate_clarifying_questions(
        self,
        section_input: SectionInput,
        factors: ConfidenceFactors,
        tier: ConfidenceTier,
    ) -> List[str]:
        """Questions targeting the weakest factors, only for low-tier sections."""
        if tier != ConfidenceTier.LOW:
            return []

        section = section_input.section_name.lower() or 'section'
        by_factor: Dict[str, List[str]] = {
            'input_completeness': [
                MISSING_FIELD_QUESTIONS[name].format(section=section)
                for name in missing_fields(section_input)
            ],
            'pattern_match': [
                f"Should the {section} follow an existing template, standard or known pattern?"
            ],
            'ai_self_assessment': [
                f"Could you clarify: {area.rstrip('?')}?"
                for area in section_input.uncertain_areas
            ],
        }

        values = factors.to_dict()
        weakest_first = sorted(values, key=lambda name: (values[name], name))

        questions: List[str] = []
        for name in weakest_first:
            if values[name] >= WEAK_FACTOR and questions:
                break
            for question in by_factor[name]:
                if question not in questions:
                    questions.append(question)

        return questions[:min(self.max_questions, MAX_QUESTIONS)]

    def aggregate_confidence(self, assessments: Iterable[ConfidenceAssessment]) -> AggregateConfidence:
        """Aggregate confidence scores from multiple sections."""
        sections = list(assessments)
        if not sections:
            return AggregateConfidence(
                overall_score=0,
                overall_tier=ConfidenceTier.LOW,
                total_sections=0,
                sections_needing_review=0,
            )

        overall_score = round_half_up(sum(s.score for s in sections) / len(sections))

        return AggregateConfidence(
            overall_score=overall_score,
            overall_tier=self.get_tier(overall_score),
            total_sections=len(sections),
            sections_needing_review=sum(1 for s in sections if s.needs_review),
            low_confidence_sections=[s for s in sections if s.tier == ConfidenceTier.LOW],
        )

    def _reasoning(self, factors: ConfidenceFactors, section_input: SectionInput) -> str:
        parts = [
            f"input completeness {factors.input_completeness:.2f}",
            f"AI self-assessment {factors.ai_self_assessment:.2f}",
            f"pattern match {factors.pattern_match:.2f}",
        ]
        if section_input.ai_self_assessment is None:
            parts.append("no model self-assessment, neutral value used and tier capped at medium")
        return "Based on " + ", ".join(parts)


def _is_present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return len(value) > 0
