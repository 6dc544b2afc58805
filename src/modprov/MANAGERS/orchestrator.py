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
Orchestration of a deployment: the vault, then the manager, then every
module with its registration, then the optional ownership handover.
"""
from typing import List, Optional
from ..MODELS.deployment_config import DeploymentConfig, NetworkConfig
from ..MODELS.errors import ConfigurationError, DependencyError
from ..MODELS.resource import ContractCall, DeploymentResult, ModuleDeployment, RunContext
from ..PROVISIONERS.base import ResourceProvisioner
from ..RUNNERS.deployment_plan import DeploymentPlanner
from .ownership import OwnershipReconciler


class Orchestrator:
    """
    Provisions the resources of one network in dependency order.

    Every step waits for its confirmation before the next one starts, and the
    first failure aborts the run. Nothing already provisioned is rolled back;
    re-running relies on the provisioner reusing existing deployments.
    """
    def __init__(self,
                 config: DeploymentConfig,
                 provisioner: ResourceProvisioner,
                 reconcile_ownership: Optional[bool] = None):
        """
        Initializes the orchestrator.

        :param config: The deployment configuration.
        :param provisioner: Provisioner that deploys resources and submits transactions.
        :param reconcile_ownership: Overrides the config's ownership handover toggle.
        """
        if reconcile_ownership is not None:
            config = config.model_copy(update={"reconcile_ownership": reconcile_ownership})
        self.config = config
        self.provisioner = provisioner
        self.planner = DeploymentPlanner()
        self.ownership = OwnershipReconciler(provisioner)

    @property
    def reconcile_ownership(self) -> bool:
        return self.config.reconcile_ownership

    def run(self) -> DeploymentResult:
        """
        Runs the whole deployment.

        :return: Handles and receipts of everything provisioned.
        :raises ConfigurationError: If the network or module list is missing,
            before anything is provisioned.
        :raises ProvisioningError: If a deployment or transaction fails.
        """
        network = self.config.network
        if network is None:
            raise ConfigurationError("Config not found", resource=self.config.network_name, step="run")

        order = self.planner.resolve_order(self.config)
        print(f"Deploying to {self.config.network_name or 'network'}: {', '.join(s.describe() for s in order)}")

        context = self.deploy_base(network)
        modules = self.deploy_modules(network, context)

        result = DeploymentResult(
            network_name=self.config.network_name,
            vault=context.vault,
            manager=context.manager,
            modules=modules,
            ownership_transfers=[m.ownership_transfer for m in modules if m.ownership_transfer],
        )
        if self.reconcile_ownership:
            for handle in (context.vault, context.manager):
                receipt = self.ownership.reconcile(handle, network.admin)
                if receipt:
                    result.ownership_transfers.append(receipt)
        return result

    def deploy_base(self, network: NetworkConfig) -> RunContext:
        """
        Provisions the vault, then the manager initialized with the vault's address.

        :param network: The target network settings.
        :return: Context holding both handles.
        """
        templates = self.config.templates

        print(f"Deploying vault: {templates.vault}...")
        vault = self.provisioner.provision_upgradeable(templates.vault, templates.vault)

        print(f"Deploying manager: {templates.manager}...")
        manager = self.provisioner.provision_upgradeable(
            templates.manager,
            templates.manager,
            templates.initializer,
            network.token,
            network.trove_manager,
            network.price_feed,
            network.borrower_operations,
            vault.address,
        )
        return RunContext(vault=vault, manager=manager)

    def deploy_modules(self, network: NetworkConfig, context: RunContext) -> List[ModuleDeployment]:
        """
        Provisions each module in order and registers it with the manager.
        A module is fully registered (and handed over, if enabled) before the
        next one starts.

        :param network: The target network settings.
        :param context: Handles produced by :meth:`deploy_base`.
        :return: The deployed modules.
        :raises ConfigurationError: If the network has no module list.
        :raises DependencyError: If the vault or manager has not been provisioned.
        """
        modules = network.modules
        if modules is None:
            raise ConfigurationError("No modules found", step="deploy_modules")
        if context.vault is None:
            raise DependencyError("Vault has not been deployed", resource="vault", step="deploy_modules")
        if context.manager is None:
            raise DependencyError("Manager has not been deployed", resource="manager", step="deploy_modules")

        templates = self.config.templates
        deployed = []
        for module in modules:
            print(f"Deploying module: {module.name} ({module.symbol})...")
            handle = self.provisioner.provision_upgradeable(
                templates.module,
                module.name,
                templates.initializer,
                network.token,
                network.borrower_operations,
                context.vault.address,
                context.manager.address,
                module.name,
                module.symbol,
                module.risk,
            )

            print(f"Registering {module.name} for token {module.linked_token}...")
            registration = self.provisioner.submit_and_wait(
                ContractCall(context.manager, "setModuleFor", (module.linked_token, handle.address))
            )

            deployment = ModuleDeployment(spec=module, handle=handle, registration=registration)
            if self.reconcile_ownership:
                deployment.ownership_transfer = self.ownership.reconcile(handle, network.admin)
            deployed.append(deployment)

        return deployed
