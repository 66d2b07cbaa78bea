"""
Tests for the TrainingOrchestrator

Covers:
- State machine transitions (idle, training, completed, failed)
- Single-flight guard on concurrent runs
- Storage failures surfaced as failed runs
- Model swap only after a successful run
- Serving passthroughs and stored-corpus helpers
- End-to-end train then predict
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

PREDICT_FEATURES = {"temperature": 25, "hourOfDay": 19, "householdSize": 4}


class BlockingRepository:
    """In-memory repository whose snapshot write waits for a release event."""

    def __init__(self):
        from energy_ai.repositories.memory_repository import InMemoryDatasetRepository

        self._inner = InMemoryDatasetRepository()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def replace_dataset(self, records):
        self.entered.set()
        await self.release.wait()
        return await self._inner.replace_dataset(records)

    async def load_dataset(self, limit=None):
        return await self._inner.load_dataset(limit)

    async def count(self):
        return await self._inner.count()

    async def save_metadata(self, metadata):
        await self._inner.save_metadata(metadata)

    async def latest_metadata(self):
        return await self._inner.latest_metadata()


def _make_orchestrator(repository, settings, seed=7):
    from energy_ai.data.dataset_generator import DatasetSynthesizer
    from energy_ai.training.orchestrator import TrainingOrchestrator

    return TrainingOrchestrator(
        repository,
        synthesizer=DatasetSynthesizer(seed=seed),
        config=settings,
    )


# =============================================================================
# State machine
# =============================================================================


class TestTrainingStateMachine:
    """Tests for train() and get_status()"""

    @pytest.mark.asyncio
    async def test_initial_status_idle(self, orchestrator):
        """Test a new orchestrator reports idle."""
        status = await orchestrator.get_status()

        assert status.status.value == "idle"
        assert status.last_training_date is None
        assert status.dataset_size == 0
        assert status.best_model is None

    @pytest.mark.asyncio
    async def test_successful_run_completes(self, orchestrator, memory_repository):
        """Test a successful run ends completed."""
        report = await orchestrator.train(300)
        status = await orchestrator.get_status()

        assert status.status.value == "completed"
        assert status.dataset_size == 300
        assert status.last_training_date == report.trained_at
        assert status.best_model == report.best_model
        assert await memory_repository.count() == 300

    @pytest.mark.asyncio
    async def test_report_contents(self, orchestrator):
        """Test the training report fields."""
        report = await orchestrator.train(300)

        assert report.best_model in ("linear", "polynomial")
        assert report.winner in ("linear", "polynomial", "heuristic_baseline")
        assert report.metrics.accuracy_percent == pytest.approx(report.metrics.r_squared * 100, abs=0.01)
        assert report.baseline_metrics.n_samples == 300
        assert len(report.candidates) in (1, 2)
        assert orchestrator.last_report is report

        data = report.to_dict()
        assert data["dataset_size"] == 300
        assert "baseline_metrics" in data

    @pytest.mark.asyncio
    async def test_metadata_persisted(self, orchestrator, memory_repository):
        """Test run metadata is saved."""
        report = await orchestrator.train(300)
        metadata = await memory_repository.latest_metadata()

        assert metadata["dataset_size"] == 300
        assert metadata["best_model"] == report.best_model
        assert metadata["winner"] == report.winner
        assert metadata["metrics"]["r_squared"] == report.metrics.r_squared

    @pytest.mark.asyncio
    async def test_default_dataset_size_from_settings(self, orchestrator, test_settings):
        """Test the configured default dataset size."""
        report = await orchestrator.train()

        assert report.dataset_size == test_settings.default_dataset_size

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [0, -5])
    async def test_non_positive_size_fails_run(self, orchestrator, memory_repository, size):
        """Test a zero or negative dataset size fails instead of using the default."""
        with pytest.raises(ValueError):
            await orchestrator.train(size)

        status = await orchestrator.get_status()
        assert status.status.value == "failed"
        assert orchestrator.active_model is None
        assert await memory_repository.count() == 0

    @pytest.mark.asyncio
    async def test_storage_failure_marks_failed(self, test_settings):
        """Test a snapshot write failure marks the run failed."""
        from energy_ai.exceptions import StorageFailure
        from energy_ai.repositories.memory_repository import InMemoryDatasetRepository

        repository = InMemoryDatasetRepository()
        repository.replace_dataset = AsyncMock(side_effect=StorageFailure("disk full"))
        orchestrator = _make_orchestrator(repository, test_settings)

        with pytest.raises(StorageFailure):
            await orchestrator.train(200)

        status = await orchestrator.get_status()
        assert status.status.value == "failed"
        assert status.error == "disk full"
        assert orchestrator.active_model is None

    @pytest.mark.asyncio
    async def test_metadata_failure_keeps_previous_model(self, test_settings):
        """Test a metadata failure keeps the previous model."""
        from energy_ai.exceptions import StorageFailure
        from energy_ai.repositories.memory_repository import InMemoryDatasetRepository

        repository = InMemoryDatasetRepository()
        orchestrator = _make_orchestrator(repository, test_settings)
        await orchestrator.train(200)
        previous = orchestrator.active_model

        repository.save_metadata = AsyncMock(side_effect=StorageFailure("metadata lost"))
        with pytest.raises(StorageFailure):
            await orchestrator.train(200)

        assert orchestrator.state.value == "failed"
        assert orchestrator.active_model is previous

    @pytest.mark.asyncio
    async def test_failed_run_can_be_retried(self, test_settings):
        """Test training succeeds after a failed run."""
        from energy_ai.exceptions import StorageFailure
        from energy_ai.repositories.memory_repository import InMemoryDatasetRepository

        repository = InMemoryDatasetRepository()
        original = repository.replace_dataset
        repository.replace_dataset = AsyncMock(side_effect=StorageFailure("flaky"))
        orchestrator = _make_orchestrator(repository, test_settings)

        with pytest.raises(StorageFailure):
            await orchestrator.train(200)

        repository.replace_dataset = original
        await orchestrator.train(200)

        status = await orchestrator.get_status()
        assert status.status.value == "completed"
        assert status.error is None

    @pytest.mark.asyncio
    async def test_status_falls_back_to_persisted_metadata(self, test_settings, memory_repository):
        """Test status is restored from saved metadata."""
        await memory_repository.save_metadata({
            "trained_at": "2024-06-01T08:00:00+00:00",
            "dataset_size": 777,
            "best_model": "polynomial",
        })
        orchestrator = _make_orchestrator(memory_repository, test_settings)

        status = await orchestrator.get_status()

        assert status.status.value == "idle"
        assert status.dataset_size == 777
        assert status.best_model == "polynomial"
        assert status.last_training_date.year == 2024


# =============================================================================
# Single-flight guard
# =============================================================================


class TestSingleFlight:
    """Concurrent train() calls are rejected."""

    @pytest.mark.asyncio
    async def test_concurrent_train_rejected(self, test_settings):
        """Test a second train call is rejected while one runs."""
        from energy_ai.exceptions import TrainingInProgress

        repository = BlockingRepository()
        orchestrator = _make_orchestrator(repository, test_settings)

        first = asyncio.create_task(orchestrator.train(200))
        await repository.entered.wait()

        status = await orchestrator.get_status()
        assert status.status.value == "training"

        with pytest.raises(TrainingInProgress):
            await orchestrator.train(200)

        with pytest.raises(TrainingInProgress):
            await orchestrator.generate_dataset(50)

        repository.release.set()
        report = await first

        assert report.dataset_size == 200
        assert orchestrator.state.value == "completed"

    @pytest.mark.asyncio
    async def test_predict_during_training_uses_previous_model(self, test_settings):
        """Test predictions use the previous model mid-run."""
        repository = BlockingRepository()
        repository.release.set()
        orchestrator = _make_orchestrator(repository, test_settings)
        await orchestrator.train(200)
        previous = orchestrator.active_model

        repository.release.clear()
        repository.entered.clear()
        second = asyncio.create_task(orchestrator.train(200))
        await repository.entered.wait()

        prediction = orchestrator.predict(PREDICT_FEATURES)
        assert prediction.model_kind == previous.kind.value
        assert orchestrator.active_model is previous

        repository.release.set()
        await second
        assert orchestrator.active_model is not previous


# =============================================================================
# Serving
# =============================================================================


class TestServing:
    """Tests for predict, recommend and analyze passthroughs."""

    def test_predict_before_train(self, orchestrator):
        """Test predicting before training raises ModelNotTrained."""
        from energy_ai.exceptions import ModelNotTrained

        with pytest.raises(ModelNotTrained):
            orchestrator.predict(PREDICT_FEATURES)

    def test_baseline_serves_without_training(self, orchestrator):
        """Test the baseline serves before any training."""
        prediction = orchestrator.predict(PREDICT_FEATURES, model_type="baseline")

        assert prediction.model_kind == "heuristic_baseline"
        assert prediction.predicted_energy_kwh == 55.7
        assert prediction.confidence == 0.82

    def test_unknown_model_type(self, orchestrator):
        """Test an unknown model type raises ValueError."""
        with pytest.raises(ValueError):
            orchestrator.predict(PREDICT_FEATURES, model_type="neural")

    def test_recommend_passthrough(self, orchestrator):
        """Test recommend delegates to the recommender."""
        rec = orchestrator.recommend(
            {"hasSolar": True},
            [{"energyConsumptionKwh": 20.0, "cost": 3.0}],
        )

        assert rec.recommended_plan.plan == "Green"

    def test_recommend_empty_history(self, orchestrator):
        """Test empty history raises InsufficientHistory."""
        from energy_ai.exceptions import InsufficientHistory

        with pytest.raises(InsufficientHistory):
            orchestrator.recommend({}, [])

    def test_analyze_passthrough(self, orchestrator, sample_corpus):
        """Test analyze delegates to the analyzer."""
        summary = orchestrator.analyze(sample_corpus)

        assert len(summary.hourly) == 24

    @pytest.mark.slow
    @pytest.mark.asyncio
    async def test_end_to_end_train_and_predict(self, orchestrator):
        """Test training then predicting a plausible value."""
        report = await orchestrator.train(1000)
        status = await orchestrator.get_status()
        prediction = orchestrator.predict(PREDICT_FEATURES)

        assert report.dataset_size == 1000
        assert status.status.value == "completed"
        assert 0 < prediction.predicted_energy_kwh < 100
        assert prediction.confidence <= 0.95
        assert prediction.model_kind == report.best_model


# =============================================================================
# Stored corpus helpers
# =============================================================================


class TestStoredCorpus:
    """Tests for generate_dataset, stats, stored patterns and dashboard."""

    @pytest.mark.asyncio
    async def test_generate_dataset(self, orchestrator, memory_repository):
        """Test standalone generation stores a snapshot."""
        stats = await orchestrator.generate_dataset(120)

        assert stats.total_records == 120
        assert await memory_repository.count() == 120
        assert orchestrator.state.value == "idle"

    @pytest.mark.asyncio
    async def test_generate_dataset_zero_records_rejected(self, orchestrator, memory_repository):
        """Test generating zero records raises and stores nothing."""
        with pytest.raises(ValueError):
            await orchestrator.generate_dataset(0)

        assert await memory_repository.count() == 0

    @pytest.mark.asyncio
    async def test_get_dataset_stats(self, orchestrator):
        """Test stats over the stored snapshot."""
        await orchestrator.generate_dataset(80)

        stats = await orchestrator.get_dataset_stats()

        assert stats.total_records == 80
        assert stats.min_consumption <= stats.avg_consumption <= stats.max_consumption

    @pytest.mark.asyncio
    async def test_analyze_stored_patterns_respects_limit(self, orchestrator, test_settings):
        """Test stored pattern analysis honors the limit."""
        await orchestrator.generate_dataset(300)

        limited = await orchestrator.analyze_stored_patterns(limit=50)
        default = await orchestrator.analyze_stored_patterns()

        assert sum(h.count for h in limited.hourly) == 50
        assert sum(h.count for h in default.hourly) == test_settings.pattern_sample_limit

    @pytest.mark.asyncio
    async def test_dashboard_before_training(self, orchestrator):
        """Test the dashboard omits predictions before training."""
        await orchestrator.generate_dataset(60)

        dashboard = await orchestrator.get_dashboard_data()

        assert dashboard["status"]["status"] == "idle"
        assert dashboard["dataset_size"] == 60
        assert len(dashboard["patterns"]["hourly"]) == 24
        assert dashboard["recent_predictions"] == []

    @pytest.mark.asyncio
    async def test_dashboard_after_training(self, orchestrator, test_settings):
        """Test the dashboard lists recent predictions."""
        await orchestrator.train(300)

        dashboard = await orchestrator.get_dashboard_data()
        recent = dashboard["recent_predictions"]

        assert dashboard["status"]["status"] == "completed"
        assert len(recent) == test_settings.dashboard_recent_predictions
        assert set(recent[0]) == {"timestamp", "actual", "predicted"}
