"""Tests for checkpoint files."""

import pytest
import torch

from deepq.checkpoint import load_checkpoint, save_checkpoint
from deepq.errors import CheckpointError
from tests.helpers import TinyNet


def test_save_creates_parent_dirs(tmp_path):
    net, target = TinyNet(), TinyNet()
    opt = torch.optim.SGD(net.parameters(), lr=0.1)
    path = tmp_path / "nested" / "dir" / "ckpt.pt"
    save_checkpoint(str(path), q_net=net, target_net=target, optimizer=opt, iteration=12, extra={"game": "Pong"})

    ckpt = load_checkpoint(str(path), "cpu")
    assert ckpt["iteration"] == 12
    assert ckpt["game"] == "Pong"
    assert torch.equal(ckpt["q_state_dict"]["fc.weight"], net.fc.weight)


def test_missing_keys(tmp_path):
    path = tmp_path / "partial.pt"
    torch.save({"q_state_dict": {}}, path)
    with pytest.raises(CheckpointError, match="missing"):
        load_checkpoint(str(path), "cpu")


def test_truncated_file(tmp_path):
    net = TinyNet()
    opt = torch.optim.SGD(net.parameters(), lr=0.1)
    path = tmp_path / "ckpt.pt"
    save_checkpoint(str(path), q_net=net, target_net=net, optimizer=opt, iteration=0)
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])
    with pytest.raises(CheckpointError):
        load_checkpoint(str(path), "cpu")


def test_missing_file_is_not_wrapped(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_checkpoint(str(tmp_path / "absent.pt"), "cpu")
