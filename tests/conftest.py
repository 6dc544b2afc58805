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
Shared fixtures: a provisioner that records every call it receives.
"""
import pytest
from modprov.MODELS.deployment_config import DeploymentConfig, ModuleSpec, NetworkConfig
from modprov.MODELS.errors import ProvisioningError
from modprov.MODELS.resource import Receipt, ResourceHandle
from modprov.PROVISIONERS.base import ResourceProvisioner

ADMIN = "0x00000000000000000000000000000000000000ad"
DEPLOYER = "0x00000000000000000000000000000000000000de"


class RecordingProvisioner(ResourceProvisioner):
    """Provisioner that records calls, hands out sequential addresses and can be told to fail."""

    def __init__(self, fail_on=(), revert_on=(), owner=DEPLOYER):
        super().__init__(confirmation_timeout=0.0, poll_interval=0.0)
        self.events = []
        self.fail_on = set(fail_on)
        self.revert_on = set(revert_on)
        self.default_owner = owner
        self.owners = {}
        self.receipts = {}

    def provision_upgradeable(self, template, deployed_name, initializer=None, *initializer_args):
        self.events.append(("provision", template, deployed_name, initializer, initializer_args))
        if deployed_name in self.fail_on:
            raise ProvisioningError("execution reverted", resource=deployed_name, step="provision")
        address = "0x%040x" % (len(self.owners) + 1)
        self.owners[address] = self.default_owner
        return ResourceHandle(address, template, deployed_name)

    def call(self, call):
        self.events.append(("call", call.function, call.target.deployed_name, call.args))
        return self.owners[call.target.address]

    def submit(self, call):
        self.events.append(("submit", call.function, call.target.deployed_name, call.args))
        tx_hash = "0x%064x" % (len(self.receipts) + 1)
        status = call.function not in self.revert_on
        if status and call.function == "transferOwnership":
            self.owners[call.target.address] = call.args[0]
        self.receipts[tx_hash] = Receipt(tx_hash, status, len(self.receipts) + 1)
        return tx_hash

    def get_receipt(self, tx_hash):
        return self.receipts.get(tx_hash)

    def of(self, kind, function=None):
        return [e for e in self.events if e[0] == kind and (function is None or e[1] == function)]


@pytest.fixture
def provisioner():
    return RecordingProvisioner()


@pytest.fixture
def make_config():
    def _make(modules=(), reconcile_ownership=False, with_network=True, **overrides):
        network = None
        if with_network:
            fields = dict(
                token="0x7070",
                trove_manager="0x7707",
                price_feed="0xfeed",
                borrower_operations="0xb0b0",
                admin=ADMIN,
                modules=None if modules is None else [ModuleSpec(**m) for m in modules],
            )
            fields.update(overrides)
            network = NetworkConfig(**fields)
        return DeploymentConfig(network_name="testnet", network=network, reconcile_ownership=reconcile_ownership)
    return _make


@pytest.fixture
def make_provisioner():
    return RecordingProvisioner
