"""Tests for the DQN agent: lifecycle, updates and target synchronization."""

import pytest
import torch

from deepq.agent import DQN
from deepq.errors import CheckpointError, InsufficientMemoryError, NotInitializedError
from deepq.value_function import SolverConfig
from tests.helpers import FixedValues, TinyNet, stack, transition

SGD = SolverConfig(optimizer="sgd", learning_rate=0.1, momentum=0.0)
LEGAL = [0, 1, 3, 4]


def make_agent(**kw):
    params = dict(
        clone_frequency=1000,
        minibatch_size=4,
        seed=0,
        network_factory=TinyNet,
    )
    params.update(kw)
    agent = DQN(LEGAL, SGD, 100, 0.99, **params)
    agent.initialize()
    return agent


def fill(agent, n=8):
    for i in range(n):
        agent.add_transition(transition(LEGAL[i % len(LEGAL)], 1.0, terminal=(i % 3 == 0), values=(i, i + 1, i + 2, i + 3), nxt=i + 4))


def params_equal(a, b):
    return a.keys() == b.keys() and all(torch.equal(a[k], b[k]) for k in a)


# ── Lifecycle ────────────────────────────────────────────────────────────────


def test_operations_before_initialize_raise():
    agent = DQN(LEGAL, SGD, 10, 0.99, network_factory=TinyNet)
    assert not agent.initialized
    with pytest.raises(NotInitializedError):
        agent.select_action(stack(), 0.0)
    with pytest.raises(NotInitializedError):
        agent.update()
    with pytest.raises(NotInitializedError):
        agent.synchronize()


def test_initialize_twice_raises():
    agent = make_agent()
    with pytest.raises(RuntimeError):
        agent.initialize()


def test_initialize_failure_propagates():
    def broken(n_outputs):
        raise RuntimeError("no network for you")

    agent = DQN(LEGAL, SGD, 10, 0.99, network_factory=broken)
    with pytest.raises(RuntimeError, match="no network"):
        agent.initialize()
    assert not agent.initialized


@pytest.mark.parametrize(
    "legal,gamma,kw",
    [
        ([], 0.9, {}),
        ([0, 18], 0.9, {}),
        ([-1], 0.9, {}),
        ([0], 1.01, {}),
        ([0], 0.9, {"minibatch_size": 0}),
        ([0], 0.9, {"clone_frequency": 0}),
    ],
)
def test_invalid_configuration(legal, gamma, kw):
    with pytest.raises(ValueError):
        DQN(legal, SGD, 10, gamma, **kw)


def test_legal_actions_sorted_and_deduplicated():
    agent = DQN([4, 1, 4, 0], SGD, 10, 0.9)
    assert agent.legal_actions == (0, 1, 4)


# ── Target snapshot ──────────────────────────────────────────────────────────


def test_target_equals_live_after_initialize():
    agent = make_agent()
    assert params_equal(agent.target.get_parameters(), agent.value_function.get_parameters())


def test_update_does_not_touch_target():
    agent = make_agent()
    fill(agent)
    before = agent.target.get_parameters()
    live_before = agent.value_function.get_parameters()

    agent.update()

    assert params_equal(agent.target.get_parameters(), before)
    assert not params_equal(agent.value_function.get_parameters(), live_before)


def test_synchronize_copies_live_parameters():
    agent = make_agent()
    fill(agent)
    agent.update()
    agent.synchronize()
    assert params_equal(agent.target.get_parameters(), agent.value_function.get_parameters())


def test_target_storage_is_independent():
    agent = make_agent()
    with torch.no_grad():
        agent.value_function.network.fc.bias.add_(5.0)
    assert not torch.equal(agent.target.network.fc.bias, agent.value_function.network.fc.bias)


def test_clone_frequency_refreshes_before_step():
    agent = make_agent(clone_frequency=2)
    fill(agent)
    agent.update()  # iteration 0: sync, step
    agent.update()  # iteration 1: step
    after_two = agent.value_function.get_parameters()
    assert not params_equal(agent.target.get_parameters(), after_two)

    agent.update()  # iteration 2: sync, step
    assert params_equal(agent.target.get_parameters(), after_two)
    assert agent.target.syncs == 3  # initialize + iterations 0 and 2


# ── Update ───────────────────────────────────────────────────────────────────


def test_update_requires_full_minibatch():
    agent = make_agent(minibatch_size=4)
    fill(agent, 3)
    with pytest.raises(InsufficientMemoryError):
        agent.update()
    assert agent.current_iteration == 0


def test_update_counts_iterations_and_returns_loss():
    agent = make_agent()
    fill(agent)
    losses = [agent.update() for _ in range(3)]
    assert agent.current_iteration == 3
    assert all(isinstance(l, float) and l >= 0.0 for l in losses)


def test_add_transition_rejects_illegal_action():
    agent = make_agent()
    for action in (2, 25):
        with pytest.raises(ValueError):
            agent.add_transition(transition(action, 1.0))
    assert agent.memory_size == 0


def test_transitions_iterates_oldest_first():
    agent = make_agent()
    fill(agent, 3)
    assert [t.action for t in agent.transitions()] == LEGAL[:3]


def test_same_seed_same_trace():
    def run():
        agent = make_agent(seed=5)
        fill(agent)
        actions = [agent.select_action(stack(), 0.5) for _ in range(20)]
        agent.update()
        return actions, agent.value_function.get_parameters()

    a1, p1 = run()
    a2, p2 = run()
    assert a1 == a2
    assert params_equal(p1, p2)


# ── Acting ───────────────────────────────────────────────────────────────────


def test_greedy_selection_over_legal_actions():
    values = torch.zeros(18)
    values[2] = 9.0  # illegal
    values[3] = 4.0
    agent = make_agent(network_factory=lambda n: FixedValues(n, values))
    assert agent.select_action(stack(), 0.0) == 3
    av = agent.select_action_greedily(stack())
    assert av.action == 3
    assert av.value == pytest.approx(4.0)
    assert len(agent.select_actions_greedily([stack(), stack(1, 1, 1, 1)])) == 2


# ── Persistence ──────────────────────────────────────────────────────────────


def test_restore_solver_resumes_state(tmp_path):
    agent = make_agent()
    fill(agent)
    for _ in range(3):
        agent.update()
    path = tmp_path / "ckpt.pt"
    agent.save(str(path), episode=7)

    other = make_agent(seed=1)
    ckpt = other.restore_solver(str(path))

    assert ckpt["episode"] == 7
    assert other.current_iteration == 3
    assert params_equal(other.value_function.get_parameters(), agent.value_function.get_parameters())
    assert params_equal(other.target.get_parameters(), agent.target.get_parameters())


def test_load_trained_model_synchronizes_target(tmp_path):
    agent = make_agent()
    fill(agent)
    agent.update()
    path = tmp_path / "model.pt"
    agent.save(str(path))

    other = make_agent(seed=1)
    other.load_trained_model(str(path))
    live = other.value_function.get_parameters()
    assert params_equal(live, agent.value_function.get_parameters())
    assert params_equal(other.target.get_parameters(), live)
    assert other.current_iteration == 0


def test_missing_model_file(tmp_path):
    agent = make_agent()
    with pytest.raises(FileNotFoundError):
        agent.load_trained_model(str(tmp_path / "nope.pt"))


def test_corrupt_model_file(tmp_path):
    path = tmp_path / "bad.pt"
    path.write_bytes(b"definitely not a checkpoint")
    agent = make_agent()
    with pytest.raises(CheckpointError):
        agent.restore_solver(str(path))
