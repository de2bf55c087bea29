#!/usr/bin/env python3
"""
Matching Service - Orchestrates the scoring pipeline over candidate batches.

Pipeline per pair:
    Weight Resolver -> Dimension Calculators -> Premium Boost
    -> Score Aggregator -> Explanation Generator

Weights are resolved once at the start of a pass and stay frozen for it.
A candidate that cannot be evaluated is dropped from the batch with a
logged reason code; the rest of the batch still completes.

All work is pure and CPU-bound, so candidates can be evaluated on worker
threads without locks. Results always come back in input order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar
import logging
import threading

from pydantic import BaseModel, ValidationError

from matchengine.config_loader import MatchingConfig, ResultPolicy
from matchengine.errors import CandidateEvaluationError
from matchengine.models import MatchPreferences, Provider, Requester
from matchengine.scorer.aggregate import aggregate_score, build_dimensions
from matchengine.scorer.dimensions import calculate_dimensions
from matchengine.scorer.explanations import generate_explanations
from matchengine.scorer.models import MatchResult, WeightVector
from matchengine.scorer.premium import calculate_premium_boost
from matchengine.scorer.weights import base_weights, resolve_weights

logger = logging.getLogger(__name__)

RecordT = TypeVar('RecordT', bound=BaseModel)


@dataclass
class RejectedCandidate:
    """A candidate excluded from a batch, with the reason it was dropped."""
    candidate_id: Optional[str]
    reason_code: str
    message: str


@dataclass
class MatchBatch:
    """Outcome of one orchestration pass."""
    matches: List[Tuple[Any, MatchResult]] = field(default_factory=list)
    rejected: List[RejectedCandidate] = field(default_factory=list)
    weights: Optional[WeightVector] = None
    weight_diagnostics: List[str] = field(default_factory=list)
    cancelled: bool = False


def _candidate_id(record: Any) -> Optional[str]:
    if isinstance(record, Mapping):
        value = record.get('id')
    else:
        value = getattr(record, 'id', None)
    return str(value) if value is not None else None


def _coerce(model_cls: Type[RecordT], record: Any) -> RecordT:
    """Accept a model instance or a raw mapping; reject anything else."""
    if isinstance(record, model_cls):
        return record
    if isinstance(record, Mapping):
        try:
            return model_cls.model_validate(record)
        except ValidationError as e:
            raise CandidateEvaluationError(
                CandidateEvaluationError.INVALID_RECORD,
                f"invalid {model_cls.__name__} record: {e.error_count()} validation error(s)",
                candidate_id=_candidate_id(record),
            ) from e
    raise CandidateEvaluationError(
        CandidateEvaluationError.INVALID_RECORD,
        f"expected {model_cls.__name__} or mapping, got {type(record).__name__}",
        candidate_id=_candidate_id(record),
    )


def rank_matches(
    pairs: Sequence[Tuple[Any, MatchResult]],
    policy: Optional[ResultPolicy] = None
) -> List[Tuple[Any, MatchResult]]:
    """Most relevant first: score descending, candidate id ascending on ties.

    Ids are compared as strings, so numeric ids sort lexicographically
    ("10" before "9"); the order is deterministic either way.

    Args:
        pairs: (candidate, result) pairs from a scoring pass
        policy: ResultPolicy to apply after sorting, or None for no filtering

    Returns:
        Sorted, filtered and truncated pairs
    """
    ranked = sorted(pairs, key=lambda pair: (-pair[1].score, str(_candidate_id(pair[0]) or '')))

    if policy is None:
        return ranked

    if policy.min_score > 0:
        ranked = [p for p in ranked if p[1].score >= policy.min_score]

    if policy.top_k is not None:
        ranked = ranked[:policy.top_k]

    return ranked


class MatchingService:
    """
    Compatibility matching between providers and requesters.

    Stateless apart from its configuration; one instance can serve any
    number of concurrent passes.
    """

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        weights: Optional[WeightVector] = None
    ):
        self.config = config or MatchingConfig()
        self.base_weights = weights or base_weights(self.config.weights)

    def resolve_weights(
        self,
        preferences: Optional[MatchPreferences] = None,
        weights: Optional[WeightVector] = None
    ) -> Tuple[WeightVector, List[str]]:
        """Resolve the weight vector for one pass."""
        return resolve_weights(
            preferences,
            base=weights or self.base_weights,
            policy=self.config.weights.negative_weight_policy,
        )

    def _evaluate(
        self,
        requester: Requester,
        provider: Provider,
        preferences: Optional[MatchPreferences],
        weights: WeightVector,
        diagnostics: List[str]
    ) -> MatchResult:
        scores = calculate_dimensions(requester, provider, preferences, self.config.engine)
        dimensions = build_dimensions(scores, weights)
        boost, _ = calculate_premium_boost(provider.premium, self.config.premium)
        score, components = aggregate_score(dimensions, boost)
        explanations = generate_explanations(dimensions, requester, provider)

        logger.debug(
            "Match requester=%s provider=%s score=%d (raw=%.3f, boost=%.2f)",
            requester.id, provider.id, score, components['raw_score'], boost
        )

        return MatchResult(
            score=score,
            dimensions=dimensions,
            explanations=explanations,
            raw_score=components['raw_score'],
            boost=boost,
            weight_diagnostics=list(diagnostics),
        )

    def score_one(
        self,
        requester: Any,
        provider: Any,
        preferences: Optional[Any] = None,
        weights: Optional[WeightVector] = None
    ) -> MatchResult:
        """Score a single requester/provider pair.

        Args:
            requester: Requester model or raw mapping
            provider: Provider model or raw mapping
            preferences: MatchPreferences model or raw mapping (optional)
            weights: Base weight vector overriding the configured one (optional)

        Returns:
            MatchResult with score, dimension breakdown and explanations

        Raises:
            CandidateEvaluationError: if either record is malformed
        """
        requester_model = _coerce(Requester, requester)
        provider_model = _coerce(Provider, provider)
        prefs = _coerce(MatchPreferences, preferences) if preferences is not None else None
        resolved, diagnostics = self.resolve_weights(prefs, weights)
        return self._evaluate(requester_model, provider_model, prefs, resolved, diagnostics)

    def _run_batch(
        self,
        candidates: Sequence[Any],
        candidate_cls: Type[BaseModel],
        make_pair: Callable[[BaseModel], Tuple[Requester, Provider]],
        preferences: Optional[Any],
        weights: Optional[WeightVector],
        stop_event: Optional[threading.Event]
    ) -> MatchBatch:
        prefs = _coerce(MatchPreferences, preferences) if preferences is not None else None
        resolved, diagnostics = self.resolve_weights(prefs, weights)
        batch = MatchBatch(weights=resolved, weight_diagnostics=diagnostics)

        def evaluate(candidate: Any):
            if stop_event is not None and stop_event.is_set():
                return None
            try:
                model = _coerce(candidate_cls, candidate)
                requester, provider = make_pair(model)
                return model, self._evaluate(requester, provider, prefs, resolved, diagnostics)
            except CandidateEvaluationError as e:
                return e
            except Exception as e:
                return CandidateEvaluationError(
                    CandidateEvaluationError.EVALUATION_FAILED,
                    f"{type(e).__name__}: {e}",
                    candidate_id=_candidate_id(candidate),
                )

        max_workers = max(1, self.config.orchestrator.max_workers)
        if max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                outcomes = list(pool.map(evaluate, candidates))
        else:
            outcomes = []
            for candidate in candidates:
                if stop_event is not None and stop_event.is_set():
                    break
                outcomes.append(evaluate(candidate))

        for outcome in outcomes:
            if outcome is None:
                continue
            if isinstance(outcome, CandidateEvaluationError):
                logger.warning(f"Dropping candidate: {outcome}")
                batch.rejected.append(RejectedCandidate(
                    candidate_id=outcome.candidate_id,
                    reason_code=outcome.reason_code,
                    message=outcome.args[0],
                ))
                continue
            batch.matches.append(outcome)

        evaluated = len(batch.matches) + len(batch.rejected)
        if stop_event is not None and stop_event.is_set() and evaluated < len(candidates):
            batch.cancelled = True
            logger.info(f"Matching pass cancelled after {evaluated}/{len(candidates)} candidates")

        logger.info(
            f"Scored {len(batch.matches)} candidate(s), rejected {len(batch.rejected)}"
        )
        return batch

    def score_batch(
        self,
        provider: Any,
        requesters: Sequence[Any],
        preferences: Optional[Any] = None,
        weights: Optional[WeightVector] = None,
        stop_event: Optional[threading.Event] = None
    ) -> MatchBatch:
        """Score one provider against many requesters, keeping rejected candidates.

        The provider is the fixed counterpart of the pass; if it is malformed
        nothing can be scored and CandidateEvaluationError propagates.
        """
        provider_model = _coerce(Provider, provider)
        return self._run_batch(
            requesters, Requester,
            lambda requester: (requester, provider_model),
            preferences, weights, stop_event,
        )

    def score_providers_batch(
        self,
        requester: Any,
        providers: Sequence[Any],
        preferences: Optional[Any] = None,
        weights: Optional[WeightVector] = None,
        stop_event: Optional[threading.Event] = None
    ) -> MatchBatch:
        """Score one requester against many providers, keeping rejected candidates."""
        requester_model = _coerce(Requester, requester)
        return self._run_batch(
            providers, Provider,
            lambda provider: (requester_model, provider),
            preferences, weights, stop_event,
        )

    def score_many(
        self,
        provider: Any,
        requesters: Sequence[Any],
        preferences: Optional[Any] = None,
        weights: Optional[WeightVector] = None,
        stop_event: Optional[threading.Event] = None
    ) -> List[Tuple[Requester, MatchResult]]:
        """(requester, result) pairs in input order; malformed requesters are dropped."""
        return self.score_batch(provider, requesters, preferences, weights, stop_event).matches

    def score_providers(
        self,
        requester: Any,
        providers: Sequence[Any],
        preferences: Optional[Any] = None,
        weights: Optional[WeightVector] = None,
        stop_event: Optional[threading.Event] = None
    ) -> List[Tuple[Provider, MatchResult]]:
        """(provider, result) pairs in input order; malformed providers are dropped."""
        return self.score_providers_batch(requester, providers, preferences, weights, stop_event).matches

    def rank(
        self,
        pairs: Sequence[Tuple[Any, MatchResult]],
        policy: Optional[ResultPolicy] = None
    ) -> List[Tuple[Any, MatchResult]]:
        """Sort most relevant first and apply the result policy (configured one by default)."""
        return rank_matches(pairs, policy if policy is not None else self.config.result_policy)

    def rank_many(
        self,
        provider: Any,
        requesters: Sequence[Any],
        preferences: Optional[Any] = None,
        policy: Optional[ResultPolicy] = None,
        stop_event: Optional[threading.Event] = None
    ) -> List[Tuple[Requester, MatchResult]]:
        """score_many followed by rank."""
        return self.rank(self.score_many(provider, requesters, preferences, stop_event=stop_event), policy)
