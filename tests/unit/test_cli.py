"""
tests/unit/test_cli.py - run_backend CLI.
"""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock, patch

import run_backend
from chains.nimiq.networks import MAINNET_GENESIS_HASH
from chains.nimiq.rpc import Configuration, NimiqRPC
from core.constants import VERSION


def backend_with(responses: dict) -> NimiqRPC:
    provider = MagicMock()

    async def fake_call(method, params=None):
        result = responses[method]
        if isinstance(result, Exception):
            raise result
        return MagicMock(result=result)

    provider.call = AsyncMock(side_effect=fake_call)
    provider.close = AsyncMock()
    provider.get_stats_summary.return_value = {"total_requests": 3}
    config = Configuration.from_json({
        "coin_name": "Nimiq",
        "coin_shortcut": "NIM",
        "rpc_url": "http://127.0.0.1:8648",
    })
    return NimiqRPC(config, provider)


@pytest.fixture
def runner():
    return CliRunner()


def test_info(runner, full_block_payload):
    genesis = dict(full_block_payload, number=1, hash=MAINNET_GENESIS_HASH)
    backend = backend_with({"getBlockByNumber": genesis, "blockNumber": 1})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "info"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["network"] == "mainnet"
    assert data["best_height"] == 1
    assert data["best_hash"] == MAINNET_GENESIS_HASH
    backend.rpc.close.assert_awaited_once()


def test_block_by_height(runner, full_block_payload):
    backend = backend_with({"getBlockByNumber": full_block_payload})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "block", "--height", "2"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["header"]["height"] == 2
    assert len(data["txs"]) == 2


def test_block_summary_requires_hash(runner):
    result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "block", "--summary"])
    assert result.exit_code == 2


def test_mempool(runner):
    backend = backend_with({"mempoolContent": ["aa" * 32]})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "mempool"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == ["aa" * 32]


def test_unknown_tx_exits_1(runner):
    backend = backend_with({"getTransactionByHash": None})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "tx", "ee" * 32])

    assert result.exit_code == 1


def test_send(runner):
    backend = backend_with({"sendRawTransaction": "cc" * 32})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "send", "0102"])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip().endswith("cc" * 32)


def test_malformed_bundled_config_exits_1(runner, tmp_path):
    (tmp_path / "broken.yaml").write_text("coin_name: [Nimiq\n")

    with patch("config.CONFIG_DIR", tmp_path):
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "--config", "broken", "mempool"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_log_context_carries_package_version(runner):
    backend = backend_with({"mempoolContent": []})

    with patch.object(run_backend.NimiqRPC, "create", return_value=backend), \
            patch.object(run_backend, "set_global_context") as set_context:
        result = runner.invoke(run_backend.cli, ["--log-level", "ERROR", "mempool"])

    assert result.exit_code == 0, result.output
    set_context.assert_called_once_with(service="nimbook", version=VERSION)
