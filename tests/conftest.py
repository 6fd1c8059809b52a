from datetime import datetime, timedelta, timezone

import pytest

from cadence.application.scheduler import Scheduler
from cadence.domain.models import Card, State
from cadence.domain.parameters import Parameters

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return T0


@pytest.fixture
def params():
    """Reference parameters with fuzz off, so intervals are deterministic."""
    return Parameters(enable_fuzz=False)


@pytest.fixture
def scheduler(params):
    return Scheduler(params)


@pytest.fixture
def make_review_card(now):
    """Factory for a card in Review last seen `elapsed` days before `now`."""

    def _make(stability=10.0, difficulty=5.0, elapsed=10, reps=5, lapses=0, card_id=1):
        last = now - timedelta(days=elapsed)
        return Card(
            card_id=card_id,
            state=State.REVIEW,
            due=now,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=3,
            scheduled_days=elapsed,
            reps=reps,
            lapses=lapses,
            last_review=last,
        )

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "CADENCE_REQUEST_RETENTION",
        "CADENCE_MAXIMUM_INTERVAL",
        "CADENCE_ENABLE_FUZZ",
        "CADENCE_WEIGHTS",
        "CADENCE_PARAMETERS_FILE",
        "CADENCE_SEED",
        "CADENCE_LEARNING_STEPS",
        "CADENCE_RELEARNING_STEPS",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
