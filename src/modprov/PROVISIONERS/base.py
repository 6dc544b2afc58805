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
The provisioner interface the orchestrator drives: deploy or locate an
upgradeable resource, read from it, and submit transactions to it while
waiting for their confirmation.
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Optional

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from ..MODELS.errors import ProvisioningError
from ..MODELS.resource import ContractCall, Receipt, ResourceHandle


class ResourceProvisioner(ABC):
    """
    Base class for provisioners.

    Subclasses implement the chain-specific primitives; confirmation polling
    is shared.
    """

    def __init__(self, confirmation_timeout: float = 300.0, poll_interval: float = 1.0):
        """
        :param confirmation_timeout: Seconds to wait for a receipt before giving up.
        :param poll_interval: Seconds between receipt lookups.
        """
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval

    @abstractmethod
    def provision_upgradeable(
        self,
        template: str,
        deployed_name: str,
        initializer: Optional[str] = None,
        *initializer_args: Any,
    ) -> ResourceHandle:
        """
        Deploys the template behind an upgradeable proxy under ``deployed_name``,
        or returns the existing deployment of that name.

        :raises ProvisioningError: If deployment or initialization fails.
        """

    @abstractmethod
    def call(self, call: ContractCall) -> Any:
        """
        Executes a read-only call and returns its result.
        """

    @abstractmethod
    def submit(self, call: ContractCall) -> str:
        """
        Signs and broadcasts a state-changing call.

        :return: The transaction hash.
        """

    @abstractmethod
    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """
        Returns the receipt of a transaction, or None while it is pending.
        """

    def submit_and_wait(self, call: ContractCall) -> Receipt:
        """
        Submits a call and blocks until it is confirmed.

        :param call: The state-changing call.
        :return: The confirmed receipt.
        :raises ProvisioningError: If the transaction reverts or is not confirmed in time.
        """
        tx_hash = self.submit(call)
        receipt = self.wait_for_receipt(tx_hash, call)
        if not receipt.status:
            raise ProvisioningError(
                f"Transaction {tx_hash} reverted: {call.describe()}",
                resource=call.target.deployed_name,
                step=call.function,
            )
        return receipt if receipt.call else replace(receipt, call=call)

    def wait_for_receipt(self, tx_hash: str, call: Optional[ContractCall] = None) -> Receipt:
        """
        Polls for the receipt of a transaction.

        :raises ProvisioningError: If no receipt appears within the confirmation timeout.
        """
        retrying = Retrying(
            retry=retry_if_result(lambda receipt: receipt is None),
            stop=stop_after_delay(self.confirmation_timeout),
            wait=wait_fixed(self.poll_interval),
        )
        try:
            return retrying(self.get_receipt, tx_hash)
        except RetryError:
            raise ProvisioningError(
                f"Transaction {tx_hash} was not confirmed within {self.confirmation_timeout}s",
                resource=call.target.deployed_name if call else None,
                step=call.function if call else "confirm",
            )
