"""The bundled example site.

A root layout wrapping every page, a dashboard layout nested inside it,
a users list and a user detail page, plus the global error boundary::

    canopy run canopy.scaffold:app --debug
"""

from pathlib import Path

from canopy.app import App
from canopy.config import AppConfig

PAGES_DIR = Path(__file__).parent / "pages"


def create_app(config: AppConfig | None = None) -> App:
    """Build the scaffold app, always mounting the bundled ``pages/`` tree."""
    app = App(config or AppConfig(pages_dir=PAGES_DIR))
    app.mount_pages(PAGES_DIR)
    return app


app = create_app()
