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
A local, simulated chain for dry-running a deployment.

Resources get deterministic addresses derived from their deployed name,
transactions are confirmed immediately, and the resulting state can be
persisted to a JSON record, one section per network, so that a re-run
reuses what already exists on the same network.
"""
import hashlib
import json
import os
from typing import Any, Dict, Optional

from ..MODELS.errors import ProvisioningError
from ..MODELS.resource import ContractCall, Receipt, ResourceHandle
from .base import ResourceProvisioner

DEFAULT_DEPLOYER = "0x" + "0" * 39 + "1"


class LedgerProvisioner(ResourceProvisioner):
    """
    Provisioner backed by an in-process ledger.

    Understands the ownable and module-registry calls the orchestrator makes:
    ``owner()``, ``transferOwnership(address)``, ``setModuleFor(token, module)``
    and ``getModuleFor(token)``.
    """

    def __init__(
        self,
        record_path: Optional[str] = None,
        deployer: str = DEFAULT_DEPLOYER,
        namespace: str = "local",
    ):
        """
        :param record_path: JSON file the ledger is loaded from and saved to.
        :param deployer: Address that signs every transaction.
        :param namespace: Network the ledger simulates. Each namespace keeps its
            own deployments in the record and salts its own addresses.
        """
        super().__init__(confirmation_timeout=0.0, poll_interval=0.0)
        self.record_path = record_path
        self.deployer = deployer
        self.namespace = namespace
        self.record: Dict[str, Any] = {}
        if record_path and os.path.exists(record_path):
            with open(record_path, 'r') as f:
                self.record = json.load(f)
        self.state: Dict[str, Any] = self.record.setdefault(namespace, {})
        for key, default in (("block_number", 0), ("deployments", {}), ("owners", {}),
                             ("modules", {}), ("transactions", {})):
            self.state.setdefault(key, default)

    def provision_upgradeable(self, template, deployed_name, initializer=None, *initializer_args):
        existing = self.state["deployments"].get(deployed_name)
        if existing:
            if existing["template"] != template:
                raise ProvisioningError(
                    f"{deployed_name} is already deployed from template {existing['template']}, not {template}",
                    resource=deployed_name,
                    step="provision",
                )
            args = [str(a) for a in initializer_args]
            if existing.get("initializer") != initializer or existing.get("args") != args:
                print(
                    f"Warning: {deployed_name} was initialized with "
                    f"{existing.get('initializer')}({', '.join(existing.get('args', []))}), "
                    f"not {initializer}({', '.join(args)}); keeping the existing deployment"
                )
            print(f"Reusing {deployed_name} at {existing['address']}")
            return ResourceHandle(existing["address"], template, deployed_name)

        address = self._derive("address", deployed_name)[:42]
        self.state["block_number"] += 1
        self.state["deployments"][deployed_name] = {
            "address": address,
            "template": template,
            "initializer": initializer,
            "args": [str(a) for a in initializer_args],
            "block_number": self.state["block_number"],
        }
        self.state["owners"][address] = self.deployer
        self._save()
        print(f"Deployed {deployed_name} ({template}) at {address}")
        return ResourceHandle(address, template, deployed_name)

    def call(self, call: ContractCall) -> Any:
        address = self._require_deployed(call)
        if call.function == "owner":
            return self.state["owners"].get(address)
        if call.function == "getModuleFor":
            return self.state["modules"].get(address, {}).get(call.args[0])
        raise ProvisioningError(
            f"Unsupported read {call.describe()}", resource=call.target.deployed_name, step=call.function
        )

    def submit(self, call: ContractCall) -> str:
        address = self._require_deployed(call)
        if call.function not in ("transferOwnership", "setModuleFor"):
            raise ProvisioningError(
                f"Unsupported transaction {call.describe()}",
                resource=call.target.deployed_name,
                step=call.function,
            )

        status = self.state["owners"].get(address) == self.deployer
        if status and call.function == "transferOwnership":
            self.state["owners"][address] = call.args[0]
        elif status:
            token, module = call.args
            self.state["modules"].setdefault(address, {})[token] = module

        self.state["block_number"] += 1
        tx_hash = self._derive("tx", f"{self.state['block_number']}:{call.describe()}")
        self.state["transactions"][tx_hash] = {
            "function": call.function,
            "target": address,
            "args": [str(a) for a in call.args],
            "status": status,
            "block_number": self.state["block_number"],
        }
        self._save()
        return tx_hash

    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        tx = self.state["transactions"].get(tx_hash)
        if tx is None:
            return None
        return Receipt(tx_hash=tx_hash, status=tx["status"], block_number=tx["block_number"])

    def _require_deployed(self, call: ContractCall) -> str:
        address = call.target.address
        if address not in self.state["owners"]:
            raise ProvisioningError(
                f"No resource deployed at {address}", resource=call.target.deployed_name, step=call.function
            )
        return address

    def _derive(self, kind: str, value: str) -> str:
        digest = hashlib.sha256(f"{self.namespace}:{kind}:{value}".encode()).hexdigest()
        return "0x" + digest

    def _save(self):
        if not self.record_path:
            return
        directory = os.path.dirname(self.record_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.record_path, 'w') as f:
            json.dump(self.record, f, indent=2, sort_keys=True)
