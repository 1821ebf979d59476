"""Driver loop connecting the engine to a UserInteraction."""

import logging

from prflow.core.events import ProgressEvent
from prflow.core.workflow.engine import WorkflowEngine, describe_outcome
from prflow.core.workflow.state import SUCCESS_STATES, PendingInput, WorkflowRun
from prflow.gateway.interaction.abc import UserInteraction

logger = logging.getLogger(__name__)


def run_workflow(
    engine: WorkflowEngine, run: WorkflowRun, interaction: UserInteraction
) -> WorkflowRun:
    """Step the run to a terminal state, answering pending inputs via interaction.

    Progress events are presented as they are produced. The terminal state's
    message is presented last: as an error for failures, as a success line
    otherwise.
    """
    while not run.state.is_terminal:
        result = engine.step(run)
        if isinstance(result, PendingInput):
            logger.debug("Waiting for input: %s", result.kind)
            if result.details:
                interaction.present_list(result.details_title or "", list(result.details))
            response = interaction.confirm(
                result.prompt, allow_custom_text=result.allow_custom_text
            )
            result = engine.resume(run, result, response)
        for event in result.events:
            interaction.present_progress(event)
        run = result.run

    outcome = describe_outcome(run)
    if run.state in SUCCESS_STATES:
        interaction.present_progress(ProgressEvent(message=outcome, style="success"))
    else:
        interaction.present_error(outcome)
    return run
