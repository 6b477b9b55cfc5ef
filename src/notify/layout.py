"""
Minimal transactional-email layout for the SMTP channel.

Bodies follow the usual shape of product emails: a greeting, a few intro
lines, an optional key/value table, an optional call-to-action button and
some outro lines. Both an HTML and a plain-text rendering are produced so
mail clients can pick either.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jinja2 import Environment

# Every interpolated value is escaped; the template never marks input safe.
_ENV = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)


@dataclass(frozen=True)
class Product:
    name: str
    link: str = ""


@dataclass(frozen=True)
class Action:
    instructions: str
    button_text: str
    link: str
    color: str = "#22BC66"


@dataclass(frozen=True)
class EmailBody:
    name: str
    intros: list[str] = field(default_factory=list)
    table: list[tuple[str, str]] = field(default_factory=list)
    action: Action | None = None
    outros: list[str] = field(default_factory=list)
    greeting: str = "Hi"
    signature: str = "Thanks"


_PAGE = _ENV.from_string(
    """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{{ title or product.name }}</title>
</head>
<body style="margin:0;padding:0;background-color:#F2F4F6;font-family:Arial,Helvetica,sans-serif;">
<table width="100%" cellpadding="0" cellspacing="0" role="presentation">
<tr><td align="center" style="padding:25px 0;">
<a href="{{ product.link or '#' }}" style="font-size:16px;font-weight:bold;color:#2F3133;text-decoration:none;">{{ product.name }}</a>
</td></tr>
<tr><td align="center">
<table width="570" cellpadding="0" cellspacing="0" role="presentation" style="background-color:#FFFFFF;padding:35px;">
<tr><td>
<h1 style="margin-top:0;color:#2F3133;font-size:19px;">{{ body.greeting }} {{ body.name }},</h1>
{% for line in body.intros %}
<p style="color:#74787E;line-height:1.5em;">{{ line }}</p>
{% endfor %}
{% if body.table %}
<table cellpadding="0" cellspacing="0" role="presentation" style="margin:20px 0;">
{% for key, value in body.table %}
<tr><td style="padding:6px 12px;color:#2F3133;font-weight:bold;">{{ key }}</td><td style="padding:6px 12px;color:#74787E;">{{ value }}</td></tr>
{% endfor %}
</table>
{% endif %}
{% if body.action %}
<p style="color:#74787E;">{{ body.action.instructions }}</p>
<p style="text-align:center;margin:30px 0;"><a href="{{ body.action.link }}" style="background-color:{{ body.action.color }};color:#FFFFFF;padding:10px 18px;border-radius:3px;text-decoration:none;display:inline-block;">{{ body.action.button_text }}</a></p>
{% endif %}
{% for line in body.outros %}
<p style="color:#74787E;line-height:1.5em;">{{ line }}</p>
{% endfor %}
<p style="color:#74787E;">{{ body.signature }},<br>{{ product.name }}</p>
</td></tr>
</table>
</td></tr>
<tr><td align="center" style="padding:35px;color:#AEAEAE;font-size:12px;">&copy; {{ product.name }}. All rights reserved.</td></tr>
</table>
</body>
</html>
"""
)


def render_html(product: Product, body: EmailBody, title: str = "") -> str:
    return _PAGE.render(product=product, body=body, title=title)


def render_text(product: Product, body: EmailBody) -> str:
    lines = [f"{body.greeting} {body.name},", ""]
    lines.extend(body.intros)
    if body.table:
        lines.append("")
        width = max(len(k) for k, _ in body.table)
        lines.extend(f"{k.ljust(width)}  {v}" for k, v in body.table)
    if body.action is not None:
        lines.extend(["", body.action.instructions, body.action.link])
    if body.outros:
        lines.append("")
        lines.extend(body.outros)
    lines.extend(["", f"{body.signature},", product.name])
    return "\n".join(lines) + "\n"
