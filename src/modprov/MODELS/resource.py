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
Handles, calls and receipts exchanged between the orchestrator and a provisioner.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .deployment_config import ModuleSpec


@dataclass(frozen=True)
class ResourceHandle:
    """Reference to a provisioned resource."""

    address: str
    template: str
    deployed_name: str


@dataclass(frozen=True)
class ContractCall:
    """A function call against a provisioned resource."""

    target: ResourceHandle
    function: str
    args: Tuple[Any, ...] = ()

    def describe(self) -> str:
        rendered = ", ".join(str(a) for a in self.args)
        return f"{self.target.deployed_name}.{self.function}({rendered})"


@dataclass(frozen=True)
class Receipt:
    """Confirmation of a submitted transaction."""

    tx_hash: str
    status: bool
    block_number: int
    call: Optional[ContractCall] = None


@dataclass(frozen=True)
class RunContext:
    """
    Handles produced by the base-resource step.
    Modules may only be provisioned once both are present.
    """

    vault: Optional[ResourceHandle] = None
    manager: Optional[ResourceHandle] = None


@dataclass
class ModuleDeployment:
    """A provisioned module and the receipt of its registration with the manager."""

    spec: ModuleSpec
    handle: ResourceHandle
    registration: Receipt
    ownership_transfer: Optional[Receipt] = None


@dataclass
class DeploymentResult:
    """Everything a completed run produced."""

    network_name: Optional[str]
    vault: ResourceHandle
    manager: ResourceHandle
    modules: List[ModuleDeployment] = field(default_factory=list)
    ownership_transfers: List[Receipt] = field(default_factory=list)

    def address_book(self) -> dict:
        """
        Maps deployed names to addresses.
        """
        book = {
            self.vault.deployed_name: self.vault.address,
            self.manager.deployed_name: self.manager.address,
        }
        for module in self.modules:
            book[module.handle.deployed_name] = module.handle.address
        return book
