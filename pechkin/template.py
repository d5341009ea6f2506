from __future__ import annotations

from pechkin.models import Template

SLOT = "%s"
DEFAULT_SUBJECT = "Attachment: %s"


def has_slot(template: str) -> bool:
    return SLOT in template


def render_slot(template: str, value: str) -> str:
    """Substitute ``value`` for the first ``%s`` in ``template``.

    Templates without a slot are returned unchanged. Any further ``%s`` or
    other ``%`` sequences are left as they are.
    """
    if not has_slot(template):
        return template
    return template.replace(SLOT, value, 1)


def render_template(template: Template, attach_name: str) -> Template:
    if not attach_name:
        return template

    subject = template.subject or DEFAULT_SUBJECT
    return Template(
        subject=render_slot(subject, attach_name),
        body_text=render_slot(template.body_text, attach_name),
    )
