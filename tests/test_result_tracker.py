"""Tests for session-scoped experiment result tracking."""

from abgate.schemas.intake import ConversionRequest
from abgate.services.result_tracker import ExperimentResult, ResultTracker


def test_results_are_grouped_by_session() -> None:
    tracker = ResultTracker()
    tracker.record(
        ExperimentResult(
            test_name="cta_button_text",
            variant="Try It Now",
            metric="button_click",
            value=1.0,
            session_id="s1",
        )
    )
    tracker.record(
        ExperimentResult(
            test_name="lead_magnet_type",
            variant="pdf",
            metric="lead_conversion",
            value=1.0,
            session_id="s2",
        )
    )

    s1 = tracker.results_for_session("s1")
    assert [r.test_name for r in s1] == ["cta_button_text"]
    assert tracker.results_for_session("missing") == []


def test_record_conversion_mints_id_and_stores_result() -> None:
    tracker = ResultTracker()
    conversion = ConversionRequest(
        testId="lead_magnet_type",
        variant="webinar",
        conversionType="form_submit",
        sessionId="sess-9",
    )

    conversion_id = tracker.record_conversion(conversion, {"user_agent": "pytest"})

    assert conversion_id.startswith("conv_")
    results = tracker.results_for_session("sess-9")
    assert len(results) == 1
    assert results[0].metric == "form_submit"
    assert results[0].value == 1.0
    assert results[0].variant == "webinar"


def test_results_for_session_returns_copy() -> None:
    tracker = ResultTracker()
    tracker.record(
        ExperimentResult(test_name="t", variant="a", metric="m", value=2.5, session_id="s")
    )

    tracker.results_for_session("s").clear()

    assert len(tracker.results_for_session("s")) == 1
