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
Dependency resolution for the provisioning steps of a deployment.
"""
from dataclasses import dataclass, field
from typing import Dict, List
from ..MODELS.deployment_config import DeploymentConfig
from ..MODELS.errors import ConfigurationError, DependencyError

VAULT = "vault"
MANAGER = "manager"


@dataclass
class PlanStep:
    """
    A single step of a deployment.
    """
    name: str
    action: str  # provision, register or reconcile
    resource: str
    depends_on: List[str] = field(default_factory=list)

    def describe(self) -> str:
        return f"{self.action} {self.resource}"


class DeploymentPlanner:
    """
    Builds the dependency graph of a deployment and orders its steps.

    The manager needs the vault's address, every module needs both, a module
    can only be registered once it exists, and ownership is handed over last.
    """
    def build_steps(self, config: DeploymentConfig) -> Dict[str, PlanStep]:
        """
        Lists every step of the deployment with its dependencies.

        :param config: The deployment configuration.
        :return: Steps keyed by name, in declaration order.
        :raises ConfigurationError: If the network or its module list is missing.
        """
        network = config.network
        if network is None:
            raise ConfigurationError("Config not found", resource=config.network_name, step="plan")
        if network.modules is None:
            raise ConfigurationError("No modules found", resource=config.network_name, step="plan")

        steps = [
            PlanStep("provision:vault", "provision", VAULT),
            PlanStep("provision:manager", "provision", MANAGER, ["provision:vault"]),
        ]
        previous = "provision:manager"
        for module in network.modules:
            provision = PlanStep(
                f"module:{module.name}:provision", "provision", module.name,
                ["provision:vault", "provision:manager", previous],
            )
            register = PlanStep(f"module:{module.name}:register", "register", module.name, [provision.name])
            steps += [provision, register]
            previous = register.name
            if config.reconcile_ownership:
                reconcile = PlanStep(f"module:{module.name}:reconcile", "reconcile", module.name, [register.name])
                steps.append(reconcile)
                previous = reconcile.name
        if config.reconcile_ownership:
            steps.append(PlanStep("reconcile:vault", "reconcile", VAULT, [previous]))
            steps.append(PlanStep("reconcile:manager", "reconcile", MANAGER, ["reconcile:vault"]))
        return {step.name: step for step in steps}

    def resolve_order(self, config: DeploymentConfig) -> List[PlanStep]:
        """
        Determines the order to run the steps in using topological sort.

        :param config: The deployment configuration.
        :return: Steps in the order they must run.
        :raises DependencyError: If a step depends on an unknown step or a cycle is detected.
        """
        steps = self.build_steps(config)

        ordered = []
        visited = set()
        processing = set()

        def visit(name):
            if name in processing:
                raise DependencyError(f"Circular dependency detected involving {name}", step="plan")
            if name in visited:
                return
            if name not in steps:
                raise DependencyError(f"Unknown step {name}", step="plan")
            processing.add(name)
            for dep in steps[name].depends_on:
                visit(dep)
            processing.remove(name)
            visited.add(name)
            ordered.append(steps[name])

        for name in steps:
            visit(name)

        return ordered
