"""Tests for the episode loop, using a scripted stand-in for the ALE env."""

import pytest

from atari.episode import NOOP, clip_reward, play_one_episode
from deepq.agent import DQN
from deepq.schedules import AnnealedEpsilon
from deepq.value_function import SolverConfig
from tests.helpers import ScriptedEnv, TinyNet


def make_agent(minibatch_size=2):
    agent = DQN(
        [0, 1, 3],
        SolverConfig(optimizer="sgd", learning_rate=0.01, momentum=0.0),
        100,
        0.99,
        minibatch_size=minibatch_size,
        network_factory=TinyNet,
    )
    agent.initialize()
    return agent


@pytest.mark.parametrize("raw,clipped", [(-3.0, -1.0), (0.0, 0.0), (0.5, 1.0), (400.0, 1.0)])
def test_clip_reward(raw, clipped):
    assert clip_reward(raw) == clipped


def test_learning_episode_records_and_updates():
    env = ScriptedEnv(length=10)
    agent = make_agent()
    result = play_one_episode(env, agent, 1.0, update=True, skip_frames=0, replay_start_size=0)

    assert result["steps"] == 10
    assert result["score"] == 50.0
    # the first three steps only fill the frame stack
    assert env.actions[:3] == [NOOP] * 3
    assert result["transitions"] == 7
    assert agent.memory_size == 7
    assert result["updates"] == 6
    assert agent.current_iteration == 6

    stored = list(agent.transitions())
    assert all(t.reward == 1.0 for t in stored)
    assert stored[-1].is_terminal
    assert not any(t.is_terminal for t in stored[:-1])
    # consecutive stacks share frames
    assert stored[1].state[2] is stored[0].state[3]
    assert stored[0].next.frame is stored[1].state[3]


def test_frame_skip_repeats_action_and_sums_reward():
    env = ScriptedEnv(length=10)
    agent = make_agent()
    result = play_one_episode(env, agent, 1.0, update=True, skip_frames=1, replay_start_size=1000)

    assert result["steps"] == 5
    assert result["score"] == 50.0
    assert env.actions[6] == env.actions[7]
    assert result["transitions"] == 2
    assert result["updates"] == 0


def test_truncation_is_not_terminal():
    env = ScriptedEnv(length=6, truncate=True)
    agent = make_agent()
    play_one_episode(env, agent, 0.0, update=True, skip_frames=0, replay_start_size=1000)
    assert not list(agent.transitions())[-1].is_terminal


def test_evaluation_episode_does_not_learn():
    env = ScriptedEnv(length=8)
    agent = make_agent()
    result = play_one_episode(env, agent, 0.05, update=False, skip_frames=0)
    assert result["transitions"] == 0
    assert agent.memory_size == 0
    assert agent.current_iteration == 0


def test_epsilon_schedule_is_called_with_iteration():
    env = ScriptedEnv(length=8)
    agent = make_agent()
    seen = []

    def eps(iteration):
        seen.append(iteration)
        return 0.0

    play_one_episode(env, agent, eps, update=True, skip_frames=0, replay_start_size=0)
    assert seen[0] == 0
    assert seen == sorted(seen)
    assert set(env.actions[3:]) <= set(agent.legal_actions)


def test_annealed_epsilon_follows_solver_iterations():
    env = ScriptedEnv(length=10)
    agent = make_agent()
    schedule = AnnealedEpsilon(1.0, 0.0, 4)
    seen = []

    def epsilon(iteration):
        seen.append(iteration)
        return schedule(iteration)

    play_one_episode(env, agent, epsilon, update=True, skip_frames=0, replay_start_size=0)
    assert seen[0] == 0
    assert seen == sorted(seen)
    assert seen[-1] == agent.current_iteration - 1
