"""Tests for the conditional gate."""

import io

from wasstep.gate import GateDecision, evaluate_condition
from wasstep.listener import BuildListener
from wasstep.variables import VariableContext


class TestEvaluateCondition:
    """Tests for evaluate_condition."""

    def test_empty_name_always_runs(
        self, listener: BuildListener, output: io.StringIO
    ) -> None:
        """Verify the step runs and nothing is logged without a condition."""
        decision = evaluate_condition("", VariableContext(), listener)

        assert decision == GateDecision.RUN
        assert output.getvalue() == ""

    def test_true_boolean_parameter_runs(self, listener: BuildListener) -> None:
        """Verify a true boolean parameter runs the step."""
        context = VariableContext(parameters={"DEPLOY": True})

        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.RUN

    def test_false_boolean_parameter_skips_even_if_env_is_set(
        self, listener: BuildListener
    ) -> None:
        """Verify a false boolean parameter wins over the environment."""
        context = VariableContext(parameters={"DEPLOY": False}, env={"DEPLOY": "1"})

        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.SKIP

    def test_non_blank_build_variable_runs(self, listener: BuildListener) -> None:
        """Verify a build variable with a value runs the step."""
        context = VariableContext(variables={"DEPLOY": "yes"})

        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.RUN

    def test_blank_build_variable_skips_even_if_env_is_set(
        self, listener: BuildListener
    ) -> None:
        """Verify a blank build variable wins over the environment."""
        context = VariableContext(variables={"DEPLOY": "   "}, env={"DEPLOY": "1"})

        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.SKIP

    def test_string_parameter_acts_as_build_variable(self, listener: BuildListener) -> None:
        """Verify a non-boolean parameter is treated as a build variable."""
        context = VariableContext(parameters={"DEPLOY": "false"})

        # Any non-blank value runs the step
        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.RUN

    def test_env_key_presence_runs(self, listener: BuildListener) -> None:
        """Verify an environment key runs the step whatever its value."""
        context = VariableContext(env={"DEPLOY": ""})

        assert evaluate_condition("DEPLOY", context, listener) == GateDecision.RUN

    def test_undefined_name_skips(
        self, listener: BuildListener, output: io.StringIO
    ) -> None:
        """Verify an undefined name skips the step and logs why."""
        decision = evaluate_condition("DEPLOY", VariableContext(), listener)

        assert decision == GateDecision.SKIP
        assert "No build variable named DEPLOY" in output.getvalue()
        assert "not run because environment variable DEPLOY is not set" in output.getvalue()

    def test_decision_is_logged(self, listener: BuildListener, output: io.StringIO) -> None:
        """Verify the boolean parameter decision is written to the job log."""
        evaluate_condition("DEPLOY", VariableContext(parameters={"DEPLOY": True}), listener)

        lines = output.getvalue().splitlines()
        assert lines[0].startswith("Searching for")
        assert "Boolean parameter DEPLOY found" in lines
        assert lines[-1] == "Build step run because boolean parameter DEPLOY is true"
