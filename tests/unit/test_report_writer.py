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
Unit tests for deployment reports.
"""
import json
from modprov.CONVERTERS.report_writer import ReportWriter
from modprov.MANAGERS.orchestrator import Orchestrator

MODULES = [{"name": "M1", "symbol": "vM1", "risk": 1, "linked_token": "0xAAA"}]


def test_write_report(tmp_path, make_config, provisioner):
    result = Orchestrator(make_config(modules=MODULES, reconcile_ownership=True), provisioner).run()

    path = ReportWriter(result).write(str(tmp_path / "reports" / "testnet.md"))

    content = (tmp_path / "reports" / "testnet.md").read_text()
    assert path.endswith("testnet.md")
    assert "# Deployment: testnet" in content
    assert result.manager.address in content
    assert "M1 (vM1, risk 1): token 0xAAA registered in" in content
    assert "## Ownership transfers" in content
    assert "M1.transferOwnership(" in content

    book = json.loads((tmp_path / "reports" / "testnet.addresses.json").read_text())
    assert book == {
        "SafetyVault": result.vault.address,
        "InterestManager": result.manager.address,
        "M1": result.modules[0].handle.address,
    }


def test_render_without_modules(make_config, provisioner):
    result = Orchestrator(make_config(), provisioner).run()
    content = ReportWriter(result).render()
    assert "No modules deployed." in content
    assert "Ownership transfers" not in content
