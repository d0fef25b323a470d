"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any abgate import so settings pick
them up instead of a local .env file.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from abgate.adapters.assignment.in_memory import InMemoryAssignmentStore
from abgate.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from abgate.core.app_factory import create_app
from abgate.services.experiment_registry import DEFAULT_EXPERIMENTS, ExperimentRegistry


class FakeClock:
    """Deterministic UNIX-seconds clock used to drive window expiry."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> ExperimentRegistry:
    return ExperimentRegistry.from_raw(DEFAULT_EXPERIMENTS)


@pytest.fixture
def rate_limiter(fake_clock: FakeClock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=fake_clock)


@pytest.fixture
def assignment_store() -> InMemoryAssignmentStore:
    return InMemoryAssignmentStore()


@pytest.fixture
def app(
    registry: ExperimentRegistry,
    rate_limiter: InMemoryFixedWindowRateLimiter,
    assignment_store: InMemoryAssignmentStore,
) -> FastAPI:
    """Fresh application with isolated stores for each test."""
    return create_app(
        registry=registry,
        rate_limiter=rate_limiter,
        assignment_store=assignment_store,
        configure_logs=False,
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
