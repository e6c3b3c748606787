"""Read-only view over the variables of a build.

A build exposes three sets of bindings to a step:
    - parameters: values the build was triggered with; boolean parameters
      keep their ``bool`` type, every other parameter is a string
    - variables: build-scoped string variables
    - env: the build environment

``VariableContext`` combines them and implements ``${NAME}`` macro
expansion. Build parameters and variables win over the environment, and
references that resolve nowhere are left untouched.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Macro pattern: ${NAME}
_MACRO_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_macros(value: str, resolve) -> str:
    """Expand ${NAME} references using a resolver callable.

    Args:
        value: String potentially containing ${NAME} references.
        resolve: Callable returning the value of a name, or None if unknown.

    Returns:
        The expanded string. Unknown references are kept as-is.
    """

    def replacer(match: re.Match[str]) -> str:
        resolved = resolve(match.group(1))
        if resolved is None:
            return match.group(0)
        return resolved

    return _MACRO_PATTERN.sub(replacer, value)


@dataclass(frozen=True)
class VariableContext:
    """Variables available to one build step execution.

    Built once per execution; the underlying mappings are exposed read-only.

    Attributes:
        parameters: Build parameters (bool for boolean parameters, else str).
        variables: Build-scoped variables.
        env: Build environment variables.

    Example:
        context = VariableContext(
            parameters={"DEPLOY": True, "APP": "shop"},
            env={"WAS_HOME": "/opt/IBM/WebSphere"},
        )
        context.expand("${WAS_HOME}/${APP}")  # "/opt/IBM/WebSphere/shop"
    """

    parameters: Mapping[str, str | bool] = field(default_factory=dict)
    variables: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @classmethod
    def from_process(
        cls,
        parameters: Mapping[str, str | bool] | None = None,
        variables: Mapping[str, str] | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> VariableContext:
        """Create a context whose environment is the current process environment.

        Args:
            parameters: Build parameters.
            variables: Build variables.
            env_overrides: Entries added to (or replacing) os.environ.

        Returns:
            A new VariableContext.
        """
        env = dict(os.environ)
        env.update(env_overrides or {})
        return cls(parameters=parameters or {}, variables=variables or {}, env=env)

    def boolean_parameter(self, name: str) -> bool | None:
        """Return the value of a boolean parameter, or None if there is none."""
        value = self.parameters.get(name)
        if isinstance(value, bool):
            return value
        return None

    def build_variable(self, name: str) -> str | None:
        """Resolve a name against build variables, then build parameters.

        Boolean parameters resolve to "true"/"false".
        """
        if name in self.variables:
            return self.variables[name]
        value = self.parameters.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def has_env(self, name: str) -> bool:
        """Whether the environment defines the given key."""
        return name in self.env

    def resolve(self, name: str) -> str | None:
        """Resolve a name: build bindings first, then the environment."""
        value = self.build_variable(name)
        if value is not None:
            return value
        return self.env.get(name)

    def expand(self, value: str | None) -> str:
        """Expand ${NAME} references in a string.

        Args:
            value: The string to expand (None is treated as empty).

        Returns:
            The expanded string.
        """
        if not value:
            return ""
        return expand_macros(value, self.resolve)

    def expand_env(self, value: str | None) -> str:
        """Expand ${NAME} references against the environment only."""
        if not value:
            return ""
        return expand_macros(value, self.env.get)

    def process_env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the environment to launch a process with.

        Args:
            base: Inherited environment (defaults to os.environ).

        Returns:
            A new dict: the inherited environment overlaid with the build one.
        """
        env = dict(os.environ if base is None else base)
        env.update(self.env)
        return env
