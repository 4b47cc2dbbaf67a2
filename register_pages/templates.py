"""Named page templates expanded through literal placeholder substitution."""

from __future__ import annotations

import re
import typing as typ

from ._constants import TEMPLATE_FIELDS
from .errors import TemplateNotFoundError
from .models import TemplateDefinition

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def substitute(text: str, replacements: cabc.Mapping[str, str]) -> str:
    """Replace every token in ``replacements`` within ``text`` in one pass.

    Longer tokens win when several match at the same offset, and replacement
    values are never rescanned for further tokens.

    Examples
    --------
    >>> substitute("Service: {{name}}", {"{{name}}": "Web Dev"})
    'Service: Web Dev'
    >>> substitute("{{a}}", {"{{a}}": "{{b}}", "{{b}}": "x"})
    '{{b}}'
    """
    tokens = [token for token in replacements if token]
    if not tokens:
        return text
    tokens.sort(key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in tokens))
    return pattern.sub(lambda match: str(replacements[match.group(0)]), text)


class TemplateStore:
    """Hold reusable page shapes keyed by template name."""

    def __init__(self) -> None:
        self._templates: dict[str, TemplateDefinition] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def add_template(self, name: str, shape: cabc.Mapping[str, typ.Any]) -> None:
        """Store ``shape`` under ``name``, replacing any earlier template."""
        self._templates[name] = TemplateDefinition(name=name, shape=dict(shape))

    def get(self, name: str) -> TemplateDefinition:
        try:
            return self._templates[name]
        except KeyError as exc:
            raise TemplateNotFoundError(name) from exc

    def expand(
        self, name: str, replacements: cabc.Mapping[str, str] | None = None
    ) -> dict[str, typ.Any]:
        """Return the template's attributes with placeholders substituted.

        Only ``title`` and ``content`` are rewritten; every other field is
        copied as-is.

        Raises
        ------
        TemplateNotFoundError
            If no template named ``name`` has been added.
        """
        page = dict(self.get(name).shape)
        for field in TEMPLATE_FIELDS:
            value = page.get(field)
            if isinstance(value, str):
                page[field] = substitute(value, replacements or {})
        return page


__all__ = ["TemplateStore", "substitute"]
