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
Parser for deployment config YAML files.
"""
import os
import re
import yaml
from typing import Any, Dict, Optional
from dotenv import dotenv_values
from pydantic import ValidationError
from ..MODELS.deployment_config import DeploymentConfig, NetworkConfig, ResourceTemplates
from ..MODELS.errors import ConfigurationError
from ..UTILS.string_interpolation import EnvironmentInterpolator

INT_TAG = "tag:yaml.org,2002:int"


class AddressSafeLoader(yaml.SafeLoader):
    """
    SafeLoader that only resolves decimal integers, so unquoted 0x addresses
    stay strings instead of being read as hexadecimal numbers.
    """


AddressSafeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
AddressSafeLoader.add_implicit_resolver(
    INT_TAG, re.compile(r"^[-+]?(?:0|[1-9][0-9_]*)$"), list("-+0123456789")
)


class ConfigParser:
    """
    Parser for deployment config files.

    A file describes any number of networks under ``networks:``; parsing
    selects one of them. Keys may be written in camelCase or snake_case.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None, env_file: Optional[str] = ".env"):
        """
        Initializes the parser with the variables available for interpolation.

        :param context: Variables for interpolation. Defaults to the process environment.
        :param env_file: A .env file whose values override the context, if it exists.
        """
        self.context = dict(os.environ) if context is None else dict(context)
        if env_file and os.path.exists(env_file):
            self.context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

    def parse(self, config_path: str, network: Optional[str] = None) -> DeploymentConfig:
        """
        Parses a config file from a path.

        :param config_path: Path to the config file.
        :param network: Name of the network to select.
        :return: Parsed configuration.
        """
        with open(config_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content, network)

    def parse_from_string(self, content: str, network: Optional[str] = None) -> DeploymentConfig:
        """
        Parses a config document from a string.

        :param content: YAML content of the config file.
        :param network: Name of the network to select. When omitted and the
            document defines exactly one network, that network is used.
        :return: Parsed configuration; ``network`` is None if the selected
            network is not defined.
        :raises ConfigurationError: If the document is not valid YAML, does
            not match the schema, or the selected network references an
            undefined variable.
        """
        try:
            data = yaml.load(content, Loader=AddressSafeLoader)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", step="parse")
        if not data:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Config document must be a mapping", step="parse")
        data = self._normalize_keys(data)

        networks = data.get('networks') or {}
        if not isinstance(networks, dict):
            raise ConfigurationError("'networks' must be a mapping of network names", step="parse")
        if network is None and len(networks) == 1:
            network = next(iter(networks))

        try:
            network_config = None
            selected = networks.get(network) if network is not None else None
            if isinstance(selected, dict):
                network_config = NetworkConfig(**self._interpolate(selected))
            elif selected is not None:
                raise ConfigurationError(f"Network {network} must be a mapping", resource=network, step="validate")
            return DeploymentConfig(
                network_name=network,
                network=network_config,
                templates=ResourceTemplates(**self._interpolate(data.get('templates') or {})),
                reconcile_ownership=self._interpolate(data.get('reconcile_ownership', False)),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config: {e}", resource=network, step="validate")

    def _interpolate(self, value: Any) -> Any:
        """
        Resolves placeholders in the string values of a parsed section.
        Only the selected network is resolved, so other networks may
        reference variables that are not set.
        """
        if isinstance(value, dict):
            return {k: self._interpolate(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._interpolate(v) for v in value]
        if isinstance(value, str):
            return EnvironmentInterpolator.interpolate(value, self.context)
        return value

    def _normalize_keys(self, value: Any) -> Any:
        """
        Recursively converts camelCase mapping keys to snake_case.
        Network names are left untouched.
        """
        if isinstance(value, list):
            return [self._normalize_keys(v) for v in value]
        if not isinstance(value, dict):
            return value
        result = {}
        for key, v in value.items():
            if key == 'networks' and isinstance(v, dict):
                result[key] = {str(name): self._normalize_keys(net) for name, net in v.items()}
            else:
                result[self._to_snake(str(key))] = self._normalize_keys(v)
        return result

    @staticmethod
    def _to_snake(key: str) -> str:
        return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()
