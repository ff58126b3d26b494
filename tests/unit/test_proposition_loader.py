"""Tests for proposition files: templating, default/agent merge, windows."""

import json
import textwrap

import pytest

from agent_judge.exceptions import ConfigurationError
from agent_judge.scoring.proposition_loader import (
    PropositionFile,
    PropositionLoader,
    fill_template_variables,
    load_proposition_file,
)
from agent_judge.scoring.trajectory_scorer import TrajectoryScorer
from fakes import FakeJudge

DEFAULT_FLUENCY = """\
dimension: fluency
include_personas: false
first_n: 2
last_n: 3
propositions:
  - id: fluency-natural
    claim: "{{agent_name}} speaks naturally in {{channel_name}}."
    weight: 2
    recommendations_for_improvement: Vary sentence openers.
  - id: fluency-repeats
    claim: "{{agent_name}} repeats the same phrases."
    inverted: true
"""

MICHAEL_FLUENCY = """\
dimension: fluency
hard: true
last_n: 1
propositions:
  - id: michael-catchphrase
    claim: "{{agent_name}} overuses one catchphrase."
"""


def write(root, dimension, name, body):
    path = root / dimension / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


@pytest.fixture
def prop_root(tmp_path):
    write(tmp_path, "fluency", "_default.yaml", DEFAULT_FLUENCY)
    write(tmp_path, "fluency", "michael.yaml", MICHAEL_FLUENCY)
    return tmp_path


def test_fill_template_variables_replaces_known():
    text = fill_template_variables(
        "{{agent_name}} said {{action}} to {{recipient_name}}",
        {"agent_name": "Michael", "action": "that's what she said", "recipient_name": "Jan"},
    )
    assert text == "Michael said that's what she said to Jan"


@pytest.mark.parametrize(
    "text,variables,expected",
    [
        ("{{agent_name}} in {{channel_name}}", {"agent_name": "Jim"}, "Jim in {{channel_name}}"),
        ("{{agent_name}} and {{unknown}}", {"agent_name": "Pam"}, "Pam and {{unknown}}"),
        ("no templates here", {}, "no templates here"),
        ("{{agent_name}} test", {}, "{{agent_name}} test"),
    ],
)
def test_fill_template_variables_leaves_unmatched(text, variables, expected):
    assert fill_template_variables(text, variables) == expected


def test_load_file_fills_claims_and_flags(prop_root):
    loaded = load_proposition_file(
        prop_root / "fluency" / "_default.yaml", {"agent_name": "Dwight"}
    )
    assert loaded.dimension == "fluency"
    assert loaded.include_personas is False
    assert loaded.hard is False
    assert loaded.target_type == "agent"
    assert (loaded.first_n, loaded.last_n) == (2, 3)

    natural, repeats = loaded.propositions
    assert natural.claim == "Dwight speaks naturally in {{channel_name}}."
    assert natural.weight == 2.0
    assert natural.recommendation == "Vary sentence openers."
    assert repeats.inverted is True
    assert repeats.recommendation is None


def test_default_only_without_agent(prop_root):
    loaded = PropositionLoader(prop_root).load_for_dimension("fluency")
    assert [p.id for p in loaded.propositions] == ["fluency-natural", "fluency-repeats"]
    assert loaded.agent_id is None


def test_agent_file_appended_after_defaults(prop_root):
    loaded = PropositionLoader(prop_root).load_for_dimension(
        "fluency", "michael", {"agent_name": "Michael Scott"}
    )
    assert [p.id for p in loaded.propositions] == [
        "fluency-natural", "fluency-repeats", "michael-catchphrase",
    ]
    assert loaded.propositions[2].claim == "Michael Scott overuses one catchphrase."
    assert loaded.agent_id == "michael"
    # flags come from the agent file, the window falls back to the default's
    assert loaded.hard is True
    assert loaded.include_personas is True
    assert (loaded.first_n, loaded.last_n) == (2, 1)


def test_yml_suffix_is_found(prop_root):
    write(prop_root, "fluency", "pam.yml", MICHAEL_FLUENCY)
    loaded = PropositionLoader(prop_root).load_for_dimension("fluency", "pam")
    assert len(loaded.propositions) == 3


def test_missing_agent_file_returns_defaults(prop_root):
    loaded = PropositionLoader(prop_root).load_for_dimension("fluency", "toby")
    assert len(loaded.propositions) == 2
    assert loaded.hard is False


def test_missing_default_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        PropositionLoader(tmp_path).load_for_dimension("suitability")


@pytest.mark.parametrize(
    "body",
    [
        "dimension: fluency\npropositions:\n  - id: x\n    claim: ''\n",
        "dimension: fluency\npropositions:\n  - id: x\n    claim: y\n    weight: 0\n",
        "dimension: fluency\nfirst_n: -1\npropositions: []\n",
        "propositions: []\n",
    ],
)
def test_invalid_file_raises(tmp_path, body):
    path = write(tmp_path, "fluency", "_default.yaml", body)
    with pytest.raises(ConfigurationError, match="Invalid proposition file"):
        load_proposition_file(path)


def test_malformed_yaml_raises(tmp_path):
    path = write(tmp_path, "fluency", "_default.yaml", "dimension: [unclosed\n")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_proposition_file(path)


MESSAGES = [f"m{i}" for i in range(8)]


@pytest.mark.parametrize(
    "first_n,last_n,expected",
    [
        (None, None, MESSAGES),
        (3, None, ["m0", "m1", "m2"]),
        (None, 2, ["m6", "m7"]),
        (None, 0, []),
        (2, 3, ["m0", "m1", "m5", "m6", "m7"]),
        (5, 5, MESSAGES),
    ],
)
def test_window(first_n, last_n, expected):
    prop_file = PropositionFile(dimension="fluency", first_n=first_n, last_n=last_n)
    assert prop_file.window(MESSAGES) == expected


async def test_score_from_files_applies_window_and_flags(prop_root, make_engine, run_store):
    judge = FakeJudge([json.dumps([{"score": s, "reasoning": "r"} for s in (9, 2, 5)])])
    scorer = TrajectoryScorer(make_engine(judge), run_store, PropositionLoader(prop_root))

    result = await scorer.score_from_files(
        "michael", "Michael", "fluency", MESSAGES, persona="World's best boss."
    )

    # window (2, 1) keeps m0, m1, m7; hard mode scales the imperfect scores
    assert result.sample_size == 3
    assert [s.score for s in result.proposition_scores] == [
        9, pytest.approx(7 * 0.8), pytest.approx(5 * 0.8),
    ]
    user = judge.calls[0]["messages"][0]["content"]
    assert "Michael overuses one catchphrase." in user
    assert "m7" in user and "m3" not in user
    assert "World's best boss." in judge.calls[0]["system"]


async def test_score_from_files_drops_persona_when_excluded(prop_root, make_engine, run_store):
    judge = FakeJudge([json.dumps([{"score": 8, "reasoning": "r"}] * 2)])
    scorer = TrajectoryScorer(make_engine(judge), run_store, PropositionLoader(prop_root))

    await scorer.score_from_files("jim", "Jim", "fluency", ["Hey."], persona="Prankster.")

    assert "Prankster." not in judge.calls[0]["system"]


async def test_score_from_files_requires_loader(make_engine, run_store):
    scorer = TrajectoryScorer(make_engine(FakeJudge()), run_store)
    with pytest.raises(ConfigurationError):
        await scorer.score_from_files("jim", "Jim", "fluency", ["Hey."])
