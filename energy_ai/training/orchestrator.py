"""
Training Orchestrator

Stateful pipeline that synthesizes a corpus, persists it, trains the
regression ensemble, compares it with the heuristic baseline and serves
predictions, recommendations and pattern summaries.

State machine: idle -> training -> (completed | failed). At most one run
is in flight per orchestrator; a concurrent call raises TrainingInProgress.
The active model is swapped only after the whole run has succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import asyncio

import structlog

from energy_ai.analysis.patterns import (
    DatasetStats,
    PatternAnalyzer,
    PatternSummary,
    dataset_stats,
)
from energy_ai.config.settings import Settings, get_settings
from energy_ai.data.dataset_generator import DatasetSynthesizer
from energy_ai.data.frames import CorpusLike
from energy_ai.evaluation.metrics import ModelEvaluator, ModelMetrics
from energy_ai.exceptions import TrainingInProgress
from energy_ai.inference.predictor import FeaturesLike, Prediction, Predictor
from energy_ai.models.ensemble import EnsembleResult, RegressionEnsembleTrainer
from energy_ai.models.regression import HeuristicBaseline
from energy_ai.optimization.plan_recommender import PlanRecommender, Recommendation
from energy_ai.repositories.base import DatasetRepository

logger = structlog.get_logger()

MODEL_TYPE_BEST = "best"
MODEL_TYPE_BASELINE = "baseline"


class TrainingState(str, Enum):
    IDLE = "idle"
    TRAINING = "training"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TrainingStatus:
    """Snapshot of the orchestrator's training state."""
    status: TrainingState
    last_training_date: Optional[datetime] = None
    dataset_size: int = 0
    best_model: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "last_training_date": (
                self.last_training_date.isoformat() if self.last_training_date else None
            ),
            "dataset_size": self.dataset_size,
            "best_model": self.best_model,
            "error": self.error,
        }


@dataclass
class TrainingReport:
    """
    Comparison report for one completed run.

    `best_model` is the learned model now serving predictions. `winner`
    is whichever of it and the heuristic baseline scored the higher R².
    """
    trained_at: datetime
    dataset_size: int
    best_model: str
    metrics: ModelMetrics
    baseline_metrics: ModelMetrics
    winner: str
    fallback_used: bool = False
    candidates: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trained_at": self.trained_at.isoformat(),
            "dataset_size": self.dataset_size,
            "best_model": self.best_model,
            "metrics": self.metrics.to_dict(),
            "baseline_metrics": self.baseline_metrics.to_dict(),
            "winner": self.winner,
            "fallback_used": self.fallback_used,
            "candidates": self.candidates,
        }


class TrainingOrchestrator:
    """
    Owns the corpus lifecycle and the single active model.

    Args:
        repository: Storage for the corpus snapshot and run metadata
        synthesizer: Corpus generator (seeded from config when omitted)
        trainer: Regression ensemble trainer
        evaluator: Metrics evaluator shared with the trainer
        recommender: Plan recommender
        analyzer: Pattern analyzer
        baseline: Heuristic comparison model
        config: Settings; the global settings when omitted

    Example:
        orchestrator = TrainingOrchestrator(InMemoryDatasetRepository())
        report = await orchestrator.train(1000)
        prediction = orchestrator.predict({"temperature": 25, "hourOfDay": 19, "householdSize": 4})
    """

    def __init__(
        self,
        repository: DatasetRepository,
        synthesizer: Optional[DatasetSynthesizer] = None,
        trainer: Optional[RegressionEnsembleTrainer] = None,
        evaluator: Optional[ModelEvaluator] = None,
        recommender: Optional[PlanRecommender] = None,
        analyzer: Optional[PatternAnalyzer] = None,
        baseline: Optional[HeuristicBaseline] = None,
        config: Optional[Settings] = None,
    ):
        self._config = config or get_settings()
        self._repository = repository
        self._synthesizer = synthesizer or DatasetSynthesizer(
            seed=self._config.random_seed,
            history_years=self._config.dataset_history_years,
        )
        self._evaluator = evaluator or ModelEvaluator()
        self._trainer = trainer or RegressionEnsembleTrainer(self._evaluator)
        self._recommender = recommender or PlanRecommender()
        self._analyzer = analyzer or PatternAnalyzer()
        self._baseline = baseline or HeuristicBaseline()
        self._predictor = Predictor()

        self._lock = asyncio.Lock()
        self._state = TrainingState.IDLE
        self._last_training_date: Optional[datetime] = None
        self._dataset_size = 0
        self._error: Optional[str] = None
        self._last_report: Optional[TrainingReport] = None

    @property
    def state(self) -> TrainingState:
        return self._state

    @property
    def last_report(self) -> Optional[TrainingReport]:
        return self._last_report

    @property
    def active_model(self) -> Optional[Any]:
        return self._predictor.model

    def _ensure_idle(self) -> None:
        if self._lock.locked():
            logger.warning("training_rejected", reason="run_in_progress")
            raise TrainingInProgress()

    # =========================================================================
    # Training
    # =========================================================================

    async def train(
        self,
        dataset_size: Optional[int] = None,
        customer_pool: Optional[Sequence[Any]] = None,
        plan_catalog: Optional[Sequence[Any]] = None,
    ) -> TrainingReport:
        """
        Run one full training cycle.

        Raises:
            TrainingInProgress: Another run is in flight
            StorageFailure: The snapshot or metadata could not be persisted
        """
        self._ensure_idle()

        async with self._lock:
            size = dataset_size if dataset_size is not None else self._config.default_dataset_size
            self._state = TrainingState.TRAINING
            self._error = None
            logger.info("training_started", dataset_size=size)

            try:
                corpus = self._synthesizer.generate(size, customer_pool, plan_catalog)
                await self._repository.replace_dataset(corpus)

                ensemble = self._trainer.train_ensemble(corpus)
                baseline_metrics = self._evaluator.evaluate(self._baseline, corpus)
                self._baseline.metrics = baseline_metrics

                winner = self._pick_winner(ensemble, baseline_metrics)
                trained_at = datetime.now(timezone.utc)

                await self._repository.save_metadata({
                    "trained_at": trained_at.isoformat(),
                    "dataset_size": len(corpus),
                    "best_model": ensemble.best_model.kind.value,
                    "winner": winner,
                    "metrics": ensemble.metrics.to_dict(),
                    "baseline_metrics": baseline_metrics.to_dict(),
                    "fallback_used": ensemble.fallback_used,
                })
            except Exception as e:
                self._state = TrainingState.FAILED
                self._error = str(e)
                logger.error("training_failed", error=str(e), exc_info=True)
                raise

            self._predictor.swap_model(ensemble.best_model)
            self._state = TrainingState.COMPLETED
            self._last_training_date = trained_at
            self._dataset_size = len(corpus)

            report = TrainingReport(
                trained_at=trained_at,
                dataset_size=len(corpus),
                best_model=ensemble.best_model.kind.value,
                metrics=ensemble.metrics,
                baseline_metrics=baseline_metrics,
                winner=winner,
                fallback_used=ensemble.fallback_used,
                candidates=[c.summary() for c in ensemble.candidates],
            )
            self._last_report = report

            logger.info(
                "training_completed",
                dataset_size=len(corpus),
                best_model=report.best_model,
                r_squared=report.metrics.r_squared,
                winner=winner,
                fallback_used=ensemble.fallback_used,
            )
            return report

    def _pick_winner(self, ensemble: EnsembleResult, baseline_metrics: ModelMetrics) -> str:
        """Higher R² wins; ties go to the learned model."""
        if baseline_metrics.r_squared > ensemble.metrics.r_squared:
            return self._baseline.kind.value
        return ensemble.best_model.kind.value

    async def get_status(self) -> TrainingStatus:
        """Current state, falling back to persisted metadata after a restart."""
        last_date = self._last_training_date
        size = self._dataset_size
        best_model = None
        if self._predictor.model is not None:
            best_model = self._predictor.model.kind.value

        if last_date is None and self._state == TrainingState.IDLE:
            metadata = await self._repository.latest_metadata()
            if metadata:
                trained_at = metadata.get("trained_at")
                last_date = (
                    datetime.fromisoformat(trained_at) if isinstance(trained_at, str) else trained_at
                )
                size = int(metadata.get("dataset_size", 0))
                best_model = metadata.get("best_model")

        return TrainingStatus(
            status=self._state,
            last_training_date=last_date,
            dataset_size=size,
            best_model=best_model,
            error=self._error,
        )

    # =========================================================================
    # Serving
    # =========================================================================

    def predict(self, features: FeaturesLike, model_type: str = MODEL_TYPE_BEST) -> Prediction:
        """
        Predict consumption with the active model or the heuristic baseline.

        Raises:
            ModelNotTrained: model_type "best" before any completed run
            ValueError: Unknown model_type
        """
        if model_type == MODEL_TYPE_BEST:
            return self._predictor.predict(features)
        if model_type == MODEL_TYPE_BASELINE:
            return self._predictor.predict(features, model=self._baseline)
        raise ValueError(
            f"model_type must be '{MODEL_TYPE_BEST}' or '{MODEL_TYPE_BASELINE}', got {model_type!r}"
        )

    def recommend(self, customer_profile: Any, usage_history: Sequence[Any]) -> Recommendation:
        return self._recommender.recommend(customer_profile, usage_history)

    def analyze(self, corpus: CorpusLike) -> PatternSummary:
        return self._analyzer.analyze(corpus)

    # =========================================================================
    # Stored corpus
    # =========================================================================

    async def analyze_stored_patterns(self, limit: Optional[int] = None) -> PatternSummary:
        """Analyze up to `limit` persisted records."""
        records = await self._repository.load_dataset(limit or self._config.pattern_sample_limit)
        return self._analyzer.analyze(records)

    async def get_dataset_stats(self) -> DatasetStats:
        records = await self._repository.load_dataset()
        return dataset_stats(records)

    async def generate_dataset(
        self,
        records: Optional[int] = None,
        customer_pool: Optional[Sequence[Any]] = None,
        plan_catalog: Optional[Sequence[Any]] = None,
    ) -> DatasetStats:
        """
        Replace the stored corpus without training.

        Raises:
            TrainingInProgress: A training run is in flight
        """
        self._ensure_idle()

        async with self._lock:
            size = records if records is not None else self._config.default_dataset_size
            corpus = self._synthesizer.generate(size, customer_pool, plan_catalog)
            await self._repository.replace_dataset(corpus)
            logger.info("dataset_generated", records=len(corpus))
            return dataset_stats(corpus)

    async def get_dashboard_data(self) -> Dict[str, Any]:
        """
        Status, dataset size, patterns and recent actual-vs-predicted pairs.

        Predictions are omitted when no model is trained.
        """
        status = await self.get_status()
        dataset_size = await self._repository.count()
        records = await self._repository.load_dataset(self._config.pattern_sample_limit)
        patterns = self._analyzer.analyze(records)

        recent = []
        n_recent = self._config.dashboard_recent_predictions
        if self._predictor.is_ready and n_recent > 0:
            for record in records[-n_recent:]:
                prediction = self._predictor.predict({
                    "temperature": record.temperature,
                    "hour_of_day": record.hour_of_day,
                    "household_size": record.household_size,
                })
                recent.append({
                    "timestamp": record.timestamp.isoformat(),
                    "actual": record.energy_consumption_kwh,
                    "predicted": prediction.predicted_energy_kwh,
                })

        return {
            "status": status.to_dict(),
            "dataset_size": dataset_size,
            "patterns": patterns.to_dict(),
            "recent_predictions": recent,
        }
