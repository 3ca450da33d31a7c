"""HTML rendering of report pages."""

import os
from typing import Any, Dict, List, Optional

from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

from ..exceptions import EncodingError

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

APOLOGY = "<p>Please wait, caches are cold...</p>\n"
SERVER_ERROR = "Internal server error (see log)\n"


class ReportRenderer:
    """Renders the header and table fragments of a report page."""

    def __init__(self, templates_dir: str = TEMPLATES_DIR):
        self.templates = Jinja2Templates(directory=templates_dir)

    def header(self, path: str, chart: Optional[str]) -> str:
        return self._render("header.html", path=path, chart=chart)

    def table(self, path: str, parent: str, rows: List[Dict[str, Any]], total: str,
              chart: Optional[str] = None, chart_data: Any = None) -> str:
        return self._render("table.html", path=path, parent=parent, rows=rows,
                            total=total, chart=chart, chart_data=chart_data)

    def apology(self) -> str:
        return APOLOGY

    def _render(self, name: str, **context) -> str:
        try:
            return self.templates.get_template(name).render(**context)
        except (TemplateError, TypeError, ValueError, RecursionError) as e:
            raise EncodingError(f"Failed to render {name}: {e}") from e
