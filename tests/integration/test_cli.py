# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Integration tests for the modprov command line.
"""
import json
import yaml
from click.testing import CliRunner
from modprov.CLI.main import cli

CONFIG = {
    "networks": {
        "goerli": {
            "token": "0x00000000000000000000000000000000000000a1",
            "troveManager": "0x00000000000000000000000000000000000000a2",
            "priceFeed": "0x00000000000000000000000000000000000000a3",
            "borrowerOperations": "0x00000000000000000000000000000000000000a4",
            "admin": "0x00000000000000000000000000000000000000ad",
            "modules": [
                {"name": "M1", "symbol": "vM1", "risk": 1, "linkedToken": "0xAAA"},
                {"name": "M2", "symbol": "vM2", "risk": 2, "linkedToken": "0xBBB"},
            ],
        },
        "empty": {
            "token": "0x1",
            "troveManager": "0x2",
            "priceFeed": "0x3",
            "borrowerOperations": "0x4",
            "admin": "0x5",
        },
    }
}


def _write_config(tmp_path):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text(yaml.dump(CONFIG))
    return str(config_file)


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'Deploy the vault' in result.output


def test_cli_deploy_no_file():
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', 'non_existent.yml', 'deploy'])
    assert result.exit_code == 0
    assert 'Error: non_existent.yml not found.' in result.output


def test_cli_validate(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', _write_config(tmp_path), '-n', 'goerli', '--env-file', '', 'validate'])
    assert result.exit_code == 0
    assert 'goerli, 2 module(s)' in result.output


def test_cli_validate_unknown_network(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', _write_config(tmp_path), '-n', 'sepolia', 'validate'])
    assert result.exit_code == 1
    assert 'network sepolia not found' in result.output


def test_cli_plan(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-f', _write_config(tmp_path), '-n', 'goerli', 'plan', '--reconcile-ownership'])
    assert result.exit_code == 0
    lines = [line.split() for line in result.output.splitlines()[2:]]
    assert lines[0] == ['1', 'provision', 'vault']
    assert lines[3] == ['4', 'register', 'M1']
    assert lines[-1] == ['10', 'reconcile', 'manager']


def test_cli_deploy(tmp_path):
    runner = CliRunner()
    ledger = tmp_path / "ledger.json"
    report = tmp_path / "report.md"
    result = runner.invoke(cli, [
        '-f', _write_config(tmp_path), '-n', 'goerli',
        'deploy', '--ledger', str(ledger), '--report', str(report), '--reconcile-ownership',
    ])
    assert result.exit_code == 0, result.output
    assert 'Deployed 2 module(s).' in result.output

    state = json.loads(ledger.read_text())["goerli"]
    manager = state["deployments"]["InterestManager"]["address"]
    assert state["modules"][manager] == {
        "0xAAA": state["deployments"]["M1"]["address"],
        "0xBBB": state["deployments"]["M2"]["address"],
    }
    admin = CONFIG["networks"]["goerli"]["admin"]
    assert set(state["owners"].values()) == {admin}
    assert report.exists()


def test_cli_deploy_rerun_reuses_deployments(tmp_path):
    runner = CliRunner()
    config = _write_config(tmp_path)
    ledger = str(tmp_path / "ledger.json")
    first = runner.invoke(cli, ['-f', config, '-n', 'goerli', 'deploy', '--ledger', ledger])
    second = runner.invoke(cli, ['-f', config, '-n', 'goerli', 'deploy', '--ledger', ledger])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert 'Reusing SafetyVault' in second.output
    assert len(json.loads(open(ledger).read())["goerli"]["deployments"]) == 4


def test_cli_deploy_without_modules(tmp_path):
    runner = CliRunner()
    ledger = tmp_path / "ledger.json"
    result = runner.invoke(cli, ['-f', _write_config(tmp_path), '-n', 'empty', 'deploy', '--ledger', str(ledger)])
    assert result.exit_code == 1
    assert 'Error: configuration: No modules found' in result.output
    assert not ledger.exists()


def test_cli_deploy_two_networks_share_ledger(tmp_path):
    config = dict(CONFIG)
    config["networks"] = dict(CONFIG["networks"], mainnet=CONFIG["networks"]["goerli"])
    config_file = tmp_path / "deploy.yml"
    config_file.write_text(yaml.dump(config))
    ledger = tmp_path / "ledger.json"

    runner = CliRunner()
    goerli = runner.invoke(cli, ['-f', str(config_file), '-n', 'goerli', 'deploy', '--ledger', str(ledger)])
    mainnet = runner.invoke(cli, ['-f', str(config_file), '-n', 'mainnet', 'deploy', '--ledger', str(ledger)])

    assert goerli.exit_code == 0, goerli.output
    assert mainnet.exit_code == 0, mainnet.output
    assert 'Reusing' not in mainnet.output
    state = json.loads(ledger.read_text())
    assert len(state["mainnet"]["deployments"]) == 4
    assert state["mainnet"]["deployments"]["SafetyVault"]["address"] != \
        state["goerli"]["deployments"]["SafetyVault"]["address"]
