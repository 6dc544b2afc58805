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
Error kinds raised while provisioning a deployment.

Every failure carries the resource it concerns and the step that was running,
so callers can tell a bad configuration apart from an infrastructure failure.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """
    Closed set of failure causes.
    """
    CONFIGURATION = "configuration"
    DEPENDENCY = "dependency"
    PROVISIONING = "provisioning"


class DeploymentError(Exception):
    """
    Base class for all deployment failures.
    """
    kind: ErrorKind

    def __init__(self, message: str, resource: Optional[str] = None, step: Optional[str] = None):
        """
        :param message: Human readable description of the failure.
        :param resource: The resource concerned (e.g. 'vault', 'manager' or a module name).
        :param step: The step that was running when the failure occurred.
        """
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.step = step

    def __str__(self) -> str:
        context = [f"{k}={v}" for k, v in (("resource", self.resource), ("step", self.step)) if v]
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ConfigurationError(DeploymentError):
    """Required configuration is absent or malformed."""
    kind = ErrorKind.CONFIGURATION


class DependencyError(DeploymentError):
    """A step started before the resource it depends on was provisioned."""
    kind = ErrorKind.DEPENDENCY


class ProvisioningError(DeploymentError):
    """The provisioner failed to deploy a resource, or a transaction failed or reverted."""
    kind = ErrorKind.PROVISIONING
