"""Mustache rendering of Vault path templates.

Command table paths use mustache placeholders, including inverted sections
that supply a default mount point::

    /auth/{{mount_point}}{{^mount_point}}approle{{/mount_point}}/login

:class:`MustacheTemplater` renders those with :mod:`chevron`. Any object
with a matching ``render`` method satisfies :class:`Templater` and can be
injected into a client instead.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import chevron

# Mustache implementations that escape ``/`` emit this entity; path segments
# need the literal slash back.
_ESCAPED_SLASH = "&#x2F;"


class Templater(Protocol):
    """Anything that can render a mustache template against a context."""

    def render(self, template: str, context: Mapping[str, Any]) -> str: ...


class MustacheTemplater:
    """Default :class:`Templater` backed by :func:`chevron.render`."""

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        return chevron.render(template, dict(context))


def render_path(templater: Templater, template: str, context: Mapping[str, Any]) -> str:
    """Render *template* and restore any escaped slashes.

    Args:
        templater: The templater to render with.
        template: Mustache template, usually ``<endpoint>/<version><path>``.
        context: Substitution values (the call's arguments).

    Returns:
        The rendered string with ``&#x2F;`` replaced by ``/``.

    Example::

        >>> render_path(MustacheTemplater(), "/secret/{{name}}", {"name": "foo/bar"})
        '/secret/foo/bar'
    """
    return templater.render(template, context).replace(_ESCAPED_SLASH, "/")
