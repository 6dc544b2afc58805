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
Writers for deployment summaries and address books.
"""
import json
import os
from jinja2 import Template
from ..MODELS.resource import DeploymentResult

SUMMARY_TEMPLATE = """\
# Deployment{% if result.network_name %}: {{ result.network_name }}{% endif %}

| Resource | Template | Address |
|----------|----------|---------|
| {{ result.vault.deployed_name }} | {{ result.vault.template }} | {{ result.vault.address }} |
| {{ result.manager.deployed_name }} | {{ result.manager.template }} | {{ result.manager.address }} |
{% for module in result.modules -%}
| {{ module.handle.deployed_name }} | {{ module.handle.template }} | {{ module.handle.address }} |
{% endfor %}
## Modules
{% for module in result.modules %}
- {{ module.spec.name }} ({{ module.spec.symbol }}, risk {{ module.spec.risk }}): token {{ module.spec.linked_token }} registered in {{ module.registration.tx_hash }}
{%- else %}
No modules deployed.
{%- endfor %}
{% if result.ownership_transfers %}
## Ownership transfers
{% for receipt in result.ownership_transfers %}
- {{ receipt.call.describe() if receipt.call else 'transferOwnership' }} in {{ receipt.tx_hash }}
{%- endfor %}
{% endif %}
"""


class ReportWriter:
    """
    Renders the outcome of a deployment run.
    """

    def __init__(self, result: DeploymentResult):
        """
        :param result: The result of a completed run.
        """
        self.result = result
        self.template = Template(SUMMARY_TEMPLATE)

    def render(self) -> str:
        return self.template.render(result=self.result)

    def write(self, path: str) -> str:
        """
        Writes a Markdown summary, and an address book next to it as
        ``<name>.addresses.json``.

        :param path: Path of the summary file.
        :return: The path of the summary file.
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, "w") as f:
            f.write(self.render())

        book_path = os.path.splitext(path)[0] + ".addresses.json"
        with open(book_path, "w") as f:
            json.dump(self.result.address_book(), f, indent=2)

        print(f"Deployment report written to {path}")
        return path
