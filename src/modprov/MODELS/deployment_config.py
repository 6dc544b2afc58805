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
Models describing a deployment: the target network, its modules and the
resource templates used to provision them.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

Address = str


class ModuleSpec(BaseModel):
    """
    One interest-rate module, linked to the token it prices.
    """
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    risk: int
    linked_token: Address = Field(min_length=1)


class NetworkConfig(BaseModel):
    """
    Per-network settings: the external references the manager and modules are
    initialized with, the administrator and the ordered module list.
    """
    token: Address = Field(min_length=1)
    trove_manager: Address = Field(min_length=1)
    price_feed: Address = Field(min_length=1)
    borrower_operations: Address = Field(min_length=1)
    admin: Address = Field(min_length=1)
    modules: Optional[List[ModuleSpec]] = None

    @field_validator("modules")
    @classmethod
    def _unique_modules(cls, modules: Optional[List[ModuleSpec]]) -> Optional[List[ModuleSpec]]:
        """Module names are deployment names and linked tokens are registry keys; both must be unique."""
        if modules is None:
            return modules
        names = [m.name for m in modules]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate module name(s): {', '.join(duplicates)}")
        seen = {}
        for module in modules:
            key = module.linked_token.lower()
            if key in seen:
                raise ValueError(
                    f"linked token {module.linked_token} is used by both "
                    f"{seen[key]} and {module.name}"
                )
            seen[key] = module.name
        return modules


class ResourceTemplates(BaseModel):
    """
    Names of the upgradeable templates each resource type is provisioned from.
    """
    vault: str = "SafetyVault"
    manager: str = "InterestManager"
    module: str = "InterestRateModule"
    initializer: str = "setUp"


class DeploymentConfig(BaseModel):
    """
    Complete configuration for one deployment run.
    Holds at most one network, selected when the config file is parsed.
    """
    network_name: Optional[str] = None
    network: Optional[NetworkConfig] = None
    templates: ResourceTemplates = Field(default_factory=ResourceTemplates)
    reconcile_ownership: bool = False
