"""Kida environment setup.

Creates a kida Environment from roost's AppConfig. The environment is
created once during App._freeze() and shared by route handlers and the
SSR render gateway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kida import Environment, FileSystemLoader

from roost.errors import ConfigurationError
from roost.templating.returns import Template

if TYPE_CHECKING:
    from roost.config import AppConfig


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment from app configuration."""
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


def render_template(env: Environment | None, tpl: Template) -> str:
    """Render a full template to string."""
    if env is None:
        msg = (
            "Template return type requires kida integration. "
            "Ensure a template_dir is configured in AppConfig."
        )
        raise ConfigurationError(msg)
    template = env.get_template(tpl.name)
    return template.render(tpl.context)
