import json
from typing import Any, Dict, Optional

from jinja2 import Environment, StrictUndefined, TemplateError, Undefined

from restapi.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


def create_environment(strict: bool = False) -> Environment:
    """Jinja2 environment used for dynamic properties."""
    env = Environment(undefined=StrictUndefined if strict else Undefined, autoescape=False)
    env.filters['tojson'] = lambda obj: json.dumps(obj, default=str)
    return env


def escape_string(value: Any) -> Any:
    """
    Escape a value substituted into a string template so the surrounding text
    stays a valid JSON string body.
    """
    if isinstance(value, Undefined):
        # Raises for StrictUndefined
        return str(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)[1:-1]
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


def is_template(value: Any) -> bool:
    return isinstance(value, str) and (
        ('{{' in value and '}}' in value) or ('{%' in value and '%}' in value)
    )


def _single_expression(template: str) -> Optional[str]:
    expr = template.strip()
    if not (expr.startswith('{{') and expr.endswith('}}')):
        return None
    inner = expr[2:-2]
    if '{{' in inner or '}}' in inner or '{%' in inner:
        return None
    return inner.strip()


def render_template(env: Environment, template: Any, context: Dict[str, Any], escape: bool = False) -> Any:
    """
    Render a template value against a context.

    Strings, lists and dicts are rendered recursively; anything else is
    returned unchanged. A string consisting of a single ``{{ expression }}``
    evaluates to the expression's native value (dict, int, ...). With
    ``escape=True`` values substituted into surrounding text are JSON-string
    escaped.

    Args:
        env: The Jinja2 environment
        template: The value to render
        context: Variables available to templates
        escape: Escape substituted values

    Returns:
        The rendered value

    Raises:
        jinja2.TemplateError: The template is invalid or, with a strict
            environment, references an undefined variable
    """
    if isinstance(template, dict):
        return {k: render_template(env, v, context, escape) for k, v in template.items()}
    if isinstance(template, list):
        return [render_template(env, item, context, escape) for item in template]
    if not is_template(template):
        return template

    expression = _single_expression(template)
    if expression:
        value = env.compile_expression(expression, undefined_to_none=False)(**context)
        if isinstance(value, Undefined):
            # Raises for StrictUndefined, renders '' otherwise
            return str(value)
        return value

    render_env = env.overlay(finalize=escape_string) if escape else env
    logger.debug(f"render_template: rendering with context_keys={list(context.keys())}")
    return render_env.from_string(template).render(**context)


__all__ = ['create_environment', 'escape_string', 'is_template', 'render_template', 'TemplateError']
