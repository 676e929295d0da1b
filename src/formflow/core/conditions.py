"""
Action trigger condition evaluation.
"""

import logging
from typing import Any, Mapping

from ..models.workflow import ActionCondition, ConditionOperator
from .templates import render_value

logger = logging.getLogger(__name__)


def evaluate_condition(condition: ActionCondition, output: Mapping[str, Any]) -> bool:
    """
    Decide whether an action should fire for the given AI output.

    A missing output field compares as the empty string. Unknown operators
    evaluate to False.

    Args:
        condition: The action's trigger condition
        output: Parsed AI output

    Returns:
        True if the action should be triggered
    """
    if condition.operator == ConditionOperator.ALWAYS:
        return True

    field_value = render_value(output.get(condition.field)).lower()
    compare_value = render_value(condition.value).lower()

    if condition.operator == ConditionOperator.EQUALS:
        result = field_value == compare_value
    elif condition.operator == ConditionOperator.CONTAINS:
        result = compare_value in field_value
    else:
        logger.warning(f"Unknown condition operator {condition.operator!r}, treating as not met")
        return False

    logger.debug(
        f"Condition output[{condition.field!r}]={field_value!r} "
        f"{condition.operator} {compare_value!r} -> {result}"
    )
    return result
