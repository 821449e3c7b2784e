"""
Form page for the Identicon Service.

The template is stored as a string constant to keep the service
self-contained.
"""

from jinja2 import Environment, select_autoescape

FORM_PAGE_TEMPLATE = """<html><head><title>Identidock</title></head><body>
<form method="POST">
  Hello <input type="text" name="name" value="{{ name }}">
  <input type="submit" value="submit">
</form>
<p>You look like a:
<img src="/identicon/{{ identifier }}"/>
</body></html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
_template = _env.from_string(FORM_PAGE_TEMPLATE)


def render_form_page(name: str, identifier: str) -> str:
    """Render the greeting form for ``name``.

    The image is linked by ``identifier`` so the link is a single plain
    path segment whatever characters the name contains.
    """
    return _template.render(name=name, identifier=identifier)
