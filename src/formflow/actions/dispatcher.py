"""
Follow-on action dispatch.
"""

import logging
from typing import Any, List, Mapping, Sequence

from ..core.conditions import evaluate_condition
from ..core.errors import ActionDispatchError
from ..core.templates import interpolate_action_prompt
from ..models.run import ActionResult, ActionResultStatus
from ..models.workflow import WorkflowAction
from .agent_runner import SideEffectTrigger

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Evaluates each action's condition and triggers the ones that match.

    Actions run sequentially and independently: a failure is recorded in
    that action's result and never stops the remaining actions.
    """

    def __init__(self, trigger: SideEffectTrigger):
        self.trigger = trigger

    async def dispatch(
        self,
        actions: Sequence[WorkflowAction],
        input: Mapping[str, Any],
        output: Mapping[str, Any],
        tenant: str,
    ) -> List[ActionResult]:
        """
        Dispatch every action against the AI output.

        Args:
            actions: Configured actions, in order
            input: Captured form submission
            output: Parsed AI output
            tenant: Site the side effects run against

        Returns:
            One result per action, in the same order. Never raises.
        """
        logger.info(f"Dispatching {len(actions)} action(s) for site {tenant}")

        results = []
        for action in actions:
            result = await self._dispatch_one(action, input, output, tenant)
            logger.info(f"Action {action.name!r} ({action.id}): {result.status}")
            results.append(result)

        return results

    async def _dispatch_one(
        self,
        action: WorkflowAction,
        input: Mapping[str, Any],
        output: Mapping[str, Any],
        tenant: str,
    ) -> ActionResult:
        try:
            if not evaluate_condition(action.condition, output):
                return ActionResult(
                    action_id=action.id,
                    action_name=action.name,
                    status=ActionResultStatus.SKIPPED,
                )

            instruction = interpolate_action_prompt(action.prompt_template, input, output)
            runner_id = await self.trigger.trigger(tenant, instruction)

        except ActionDispatchError as e:
            logger.error(f"Action {action.name!r} failed: {e.message}")
            return self._error_result(action, e.message)
        except Exception as e:
            logger.exception(f"Action {action.name!r} raised unexpectedly")
            return self._error_result(action, str(e) or e.__class__.__name__)

        return ActionResult(
            action_id=action.id,
            action_name=action.name,
            status=ActionResultStatus.TRIGGERED,
            agent_runner_id=runner_id,
        )

    @staticmethod
    def _error_result(action: WorkflowAction, message: str) -> ActionResult:
        return ActionResult(
            action_id=action.id,
            action_name=action.name,
            status=ActionResultStatus.ERROR,
            error=message,
        )
