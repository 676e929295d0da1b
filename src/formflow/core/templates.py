"""
Prompt template interpolation.

Templates use ``{{name}}`` placeholders. There is no escaping, nesting or
control flow: a placeholder either resolves to a value or renders empty.
"""

import json
import re
from typing import Any, Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")
ACTION_PLACEHOLDER_PATTERN = re.compile(r"\{\{(.*?)\}\}")

OUTPUT_PREFIX = "output."


def render_value(value: Any) -> str:
    """Stringify a variable for substitution into a prompt."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    # JSON numbers like 1.0 render as "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def interpolate(template: str, variables: Mapping[str, Any]) -> str:
    """
    Replace every ``{{name}}`` in ``template`` with ``variables[name]``.

    Missing and ``None`` values render as the empty string.

    Args:
        template: Template text
        variables: Values to substitute

    Returns:
        Rendered text
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda match: render_value(variables.get(match.group(1))),
        template,
    )


def interpolate_action_prompt(
    template: str,
    input: Mapping[str, Any],
    output: Mapping[str, Any],
) -> str:
    """
    Render an action prompt against the submission and the AI output.

    ``{{output.key}}`` reads from ``output``; any other name reads from
    ``input``. Whitespace inside the braces is ignored.
    """

    def _resolve(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        if name.startswith(OUTPUT_PREFIX):
            return render_value(output.get(name[len(OUTPUT_PREFIX):]))
        return render_value(input.get(name))

    return ACTION_PLACEHOLDER_PATTERN.sub(_resolve, template)
