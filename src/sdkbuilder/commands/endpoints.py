"""``sdkbuilder endpoints`` -- list the endpoints an endpoints file defines.

Validates the tree the same way :class:`~sdkbuilder.builder.SDKBuilder`
does, without needing a base URL, and prints one row per endpoint. Skipped
or ambiguous nodes are reported as warnings on stderr.
"""

from __future__ import annotations

from pathlib import Path

import typer

from sdkbuilder.output import print_table, warning


def endpoints_command(
    file: Path = typer.Argument(help="Endpoints file (JSON or YAML)."),
) -> None:
    """List every endpoint defined in FILE.

    Example::

        sdkbuilder endpoints api.yaml
        sdkbuilder --json endpoints api.yaml
    """
    from sdkbuilder.config import load_endpoints_file
    from sdkbuilder.generator.endpoint_tree import validate_endpoint_tree
    from sdkbuilder.models import EndpointGroup

    document = load_endpoints_file(file)
    validation = validate_endpoint_tree(document["endpoints"])

    for issue in validation.issues:
        warning(f"{issue.path}: {issue.message}")

    rows: list[list[str]] = []

    def _collect(group: EndpointGroup, prefix: str) -> None:
        for key, node in group.items():
            dotted = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(node, EndpointGroup):
                _collect(node, dotted)
            else:
                rows.append([dotted, node.method.value, node.path])

    _collect(validation.tree, "")
    print_table(["Name", "Method", "Path"], rows, title="Endpoints")
