"""Kida environment setup.

Creates a kida Environment from the app's AppConfig.  The environment is
created once during ``App._freeze()`` and passed through the request
pipeline.
"""

from kida import Environment, FileSystemLoader

from canopy.config import AppConfig
from canopy.templating.returns import Template


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment rooted at the pages directory.

    Layouts, page templates, and the error boundary template all resolve
    relative to ``config.pages_dir``.  Templates reload on change in
    debug mode.
    """
    return Environment(
        loader=FileSystemLoader(str(config.pages_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )


def render_template(env: Environment, tpl: Template) -> str:
    """Render a full template to string."""
    template = env.get_template(tpl.name)
    return template.render(tpl.context)
