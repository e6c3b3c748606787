"""Conditional gate deciding whether a build step runs.

The gate is driven by the step's ``run_if`` name. Sources are searched in
this order, the first one defining the name decides:

    1. a boolean build parameter: run iff it is true
    2. a build variable: run iff its value is not blank
    3. the build environment: run iff the key exists (value ignored)

If none defines the name, the step is skipped. Each decision is written to
the job log together with the source that made it.
"""

from enum import Enum

from wasstep.listener import BuildListener
from wasstep.variables import VariableContext


class GateDecision(str, Enum):
    """Outcome of the conditional gate."""

    RUN = "run"
    SKIP = "skip"


def evaluate_condition(
    condition_name: str,
    context: VariableContext,
    listener: BuildListener,
) -> GateDecision:
    """Decide whether the step runs.

    Args:
        condition_name: Name of the parameter/variable to look for. An empty
            name means the step always runs.
        context: Bindings of the current build.
        listener: Job log receiving one line per decision taken.

    Returns:
        GateDecision.RUN or GateDecision.SKIP.
    """
    if not condition_name:
        return GateDecision.RUN

    listener.info(
        f"Searching for a boolean parameter, a build variable or an environment "
        f"variable named {condition_name}"
    )

    # Boolean parameters take precedence over every other source
    boolean_value = context.boolean_parameter(condition_name)
    if boolean_value is not None:
        listener.info(f"Boolean parameter {condition_name} found")
        if boolean_value:
            listener.info(
                f"Build step run because boolean parameter {condition_name} is true"
            )
            return GateDecision.RUN
        listener.info(
            f"Build step not run because boolean parameter {condition_name} is false"
        )
        return GateDecision.SKIP

    variable_value = context.build_variable(condition_name)
    if variable_value is not None:
        if variable_value.strip():
            listener.info(
                f"Build step run because build variable {condition_name} has a value"
            )
            return GateDecision.RUN
        listener.info(
            f"Build step not run because build variable {condition_name} is empty"
        )
        return GateDecision.SKIP

    listener.info(f"No build variable named {condition_name}")

    if context.has_env(condition_name):
        listener.info(
            f"Build step run because environment variable {condition_name} is set"
        )
        return GateDecision.RUN

    listener.info(
        f"Build step not run because environment variable {condition_name} is not set"
    )
    return GateDecision.SKIP
