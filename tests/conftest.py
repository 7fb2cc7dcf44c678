"""Shared fixtures: a Jinja2 environment stands in for the expression evaluator."""
import pytest
from jinja2 import Environment, StrictUndefined


@pytest.fixture()
def render():
    """Render a template against a registry and return every ``emit``-ted value."""

    def _render(registry, source, **context):
        emitted = []

        def emit(value):
            emitted.append(value)
            return ""

        env = Environment(undefined=StrictUndefined)
        env.globals.update(registry)
        env.globals["emit"] = emit
        env.from_string(source).render(**context)
        return emitted

    return _render
