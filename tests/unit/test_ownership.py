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
Unit tests for the ownership reconciler.
"""
from modprov.MANAGERS.ownership import OwnershipReconciler

ADMIN = "0x00000000000000000000000000000000000000ad"


def _handle(provisioner):
    return provisioner.provision_upgradeable("SafetyVault", "SafetyVault")


def test_transfers_when_owner_differs(provisioner):
    handle = _handle(provisioner)
    receipt = OwnershipReconciler(provisioner).reconcile(handle, ADMIN)

    assert receipt is not None
    assert receipt.call.function == "transferOwnership"
    assert receipt.call.args == (ADMIN,)
    assert provisioner.owners[handle.address] == ADMIN


def test_noop_when_already_owner(make_provisioner):
    provisioner = make_provisioner(owner=ADMIN)
    handle = _handle(provisioner)

    assert OwnershipReconciler(provisioner).reconcile(handle, ADMIN) is None
    assert provisioner.of("submit") == []


def test_noop_without_target(provisioner):
    handle = _handle(provisioner)

    assert OwnershipReconciler(provisioner).reconcile(handle, None) is None
    assert OwnershipReconciler(provisioner).reconcile(handle, "") is None
    assert provisioner.of("call") == []


def test_second_reconcile_is_noop(provisioner):
    handle = _handle(provisioner)
    reconciler = OwnershipReconciler(provisioner)
    reconciler.reconcile(handle, ADMIN)
    reconciler.reconcile(handle, ADMIN)

    assert len(provisioner.of("submit", "transferOwnership")) == 1
