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
Substitution of ${VAR} placeholders in deployment config files.
"""
import re
from typing import Dict

from ..MODELS.errors import ConfigurationError

# ${VAR}, ${VAR:-default} or ${VAR:+value}
PLACEHOLDER = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([-+])([^}]*))?\}')


class EnvironmentInterpolator:
    """
    Resolves placeholders against a variable context, so that addresses and
    secrets can be kept out of the config file.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str]) -> str:
        """
        Interpolates every placeholder in the template.

        :param template: Text containing ${VAR} placeholders.
        :param context: Variables available for substitution.
        :return: The interpolated text.
        :raises ConfigurationError: If a bare ${VAR} is not defined in the context.
        """
        missing = []

        def replace(match):
            name, modifier, alternative = match.groups()
            value = context.get(name)
            if modifier == '-':
                return value if value else alternative
            if modifier == '+':
                return alternative if value else ''
            if value is None:
                missing.append(name)
                return match.group(0)
            return value

        result = PLACEHOLDER.sub(replace, template)
        if missing:
            raise ConfigurationError(
                f"Undefined variable(s) in config: {', '.join(sorted(set(missing)))}",
                step="interpolate",
            )
        return result
