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
Hands ownership of provisioned resources over to an administrator.
"""
from typing import Optional
from ..MODELS.resource import ContractCall, Receipt, ResourceHandle
from ..PROVISIONERS.base import ResourceProvisioner


class OwnershipReconciler:
    """
    Transfers ownership of a resource to a target address when it does not
    already hold it.
    """
    def __init__(self, provisioner: ResourceProvisioner):
        self.provisioner = provisioner

    def reconcile(self, handle: ResourceHandle, target: Optional[str]) -> Optional[Receipt]:
        """
        Reads the current owner and transfers ownership if it differs from the target.

        :param handle: The resource to reconcile.
        :param target: The desired owner. Nothing happens when it is empty.
        :return: The receipt of the transfer, or None if no transfer was needed.
        """
        if not target:
            return None

        current = self.provisioner.call(ContractCall(handle, "owner"))
        if current is not None and str(current).lower() == target.lower():
            print(f"{handle.deployed_name} is already owned by {target}")
            return None

        print(f"Transferring ownership of {handle.deployed_name} from {current} to {target}...")
        return self.provisioner.submit_and_wait(ContractCall(handle, "transferOwnership", (target,)))
