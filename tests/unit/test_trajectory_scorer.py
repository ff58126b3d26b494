"""Tests for run-level dimension scoring."""

import json

import pytest

from agent_judge.exceptions import JudgeError
from agent_judge.models.domain import Proposition, TokenUsage
from agent_judge.scoring.trajectory_scorer import TrajectoryScorer, ngram_evidence
from fakes import FakeJudge


def batch_json(*scores):
    return json.dumps([{"score": s, "reasoning": f"r{s}"} for s in scores])


PROPS = [
    Proposition(id="p-natural", claim="Speech is natural.", weight=2.0),
    Proposition(id="p-repeats", claim="The agent repeats itself.", inverted=True),
]


def test_ngram_evidence():
    stats = ngram_evidence(["a b c d e f", "a b c d e f"])
    assert stats == {"trigram": 1.0, "fivegram": 1.0}


async def test_empty_messages_complete_with_max_score(make_engine, run_store):
    judge = FakeJudge()
    result = await TrajectoryScorer(make_engine(judge), run_store).score_dimension(
        "a1", "michael", "persona_adherence", PROPS, []
    )
    assert result.overall_score == 9
    assert result.sample_size == 0
    assert result.proposition_scores == []
    assert judge.calls == []
    assert run_store.runs[result.evaluation_run_id].status == "completed"


async def test_weighted_mean_with_inversion(make_engine, run_store):
    judge = FakeJudge([batch_json(8, 2)])
    result = await TrajectoryScorer(make_engine(judge), run_store).score_dimension(
        "a1", "michael", "persona_adherence", PROPS, ["I am the boss.", "Dunder Mifflin rules."]
    )

    # p-natural 8 (weight 2), p-repeats inverted 9 - 2 = 7 (weight 1)
    assert [s.score for s in result.proposition_scores] == [8, 7]
    assert result.overall_score == pytest.approx(23 / 3)
    assert result.sample_size == 2
    assert result.token_usage == TokenUsage(10, 5)
    assert result.ngram_stats is None

    run = run_store.runs[result.evaluation_run_id]
    assert run.status == "completed"
    assert run.overall_score == pytest.approx(23 / 3)
    assert run.sample_size == 2
    assert run.dimensions == ["persona_adherence"]
    assert [s.proposition_id for s in run_store.scores[run.run_id]] == ["p-natural", "p-repeats"]


async def test_hard_mode_penalizes_imperfect_scores(make_engine, run_store):
    judge = FakeJudge([batch_json(9, 5)])
    props = [Proposition(id="a", claim="A."), Proposition(id="b", claim="B.")]
    result = await TrajectoryScorer(make_engine(judge), run_store).score_dimension(
        "a1", "dwight", "suitability", props, ["Fact: bears eat beets."], hard=True
    )
    assert [s.score for s in result.proposition_scores] == [9, pytest.approx(4.0)]


async def test_fluency_adds_ngram_evidence(make_engine, run_store):
    judge = FakeJudge([batch_json(6)])
    messages = ["that's what she said today", "that's what she said again"]
    result = await TrajectoryScorer(make_engine(judge), run_store).score_dimension(
        "a1", "michael", "fluency", [Proposition(id="f", claim="Fluent.")], messages,
        persona="Regional manager.",
    )

    assert set(result.ngram_stats) == {"trigram", "fivegram"}
    user = judge.calls[0]["messages"][0]["content"]
    assert "[Supplementary Evidence] N-gram repetition analysis: 3-gram repetition: " in user
    assert "michael acts: that's what she said today" in user
    assert "Regional manager." in judge.calls[0]["system"]


async def test_failure_marks_run_failed(make_engine, run_store):
    judge = FakeJudge([JudgeError("boom")])
    scorer = TrajectoryScorer(make_engine(judge), run_store)
    with pytest.raises(JudgeError):
        await scorer.score_dimension("a1", "michael", "fluency", PROPS, ["hello"])
    assert [r.status for r in run_store.runs.values()] == ["failed"]


async def test_recommendation_attached_to_imperfect_scores(make_engine, run_store):
    judge = FakeJudge([batch_json(9, 4)])
    props = [
        Proposition(id="ok", claim="A.", recommendation="Keep it up."),
        Proposition(id="weak", claim="B.", recommendation="Vary your openers."),
    ]
    result = await TrajectoryScorer(make_engine(judge), run_store).score_dimension(
        "a1", "pam", "fluency", props, ["Hi.", "Hi again."]
    )
    assert [s.recommendation for s in result.proposition_scores] == [None, "Vary your openers."]
