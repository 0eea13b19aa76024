"""Release name templates.

Templates are rendered with Jinja2. Go-style field references such as
``{{ .ProjectName }}_{{ .Version }}`` are accepted and mean the same as
``{{ ProjectName }}_{{ Version }}``. Any reference to a field the context does
not define is an error rather than an empty string.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from jinja2 import Environment, StrictUndefined, TemplateError

from forgepub.core.result import Err, Ok, Result
from forgepub.release.errors import PublishError

_GO_FIELD_RE = re.compile(r"\{\{(-?)\s*\.(?=[A-Za-z_])")

_env = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def to_jinja(template: str) -> str:
    """Rewrite ``{{ .Field`` openers to plain Jinja ``{{ Field``."""
    return _GO_FIELD_RE.sub(lambda m: "{{" + m.group(1) + " ", template)


def render(template: str, fields: Mapping[str, object]) -> Result[str, PublishError]:
    try:
        compiled = _env.from_string(to_jinja(template))
        return Ok(compiled.render(**fields))
    except TemplateError as e:
        return Err(
            PublishError(
                kind="template",
                message=f"template: {template!r}: {e.message or e}",
            )
        )
    except (TypeError, ValueError, ArithmeticError) as e:
        # Valid syntax that fails while evaluating, e.g. str + int.
        return Err(PublishError(kind="template", message=f"template: {template!r}: {e}"))
