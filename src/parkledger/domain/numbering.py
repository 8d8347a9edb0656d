"""Journal entry number templates.

Templates use ``{YYYY}`` for the year, ``{MM}`` for the month and a run of
``#`` characters in braces (``{####}``) for the zero-padded per-period
sequence, e.g. ``AST-{YYYY}-{MM}-{####}``. ``{YY}`` is accepted only alongside
``{YYYY}``.
"""

import re
from datetime import date

from parkledger.domain.errors import ValidationError

_SEQUENCE_RE = re.compile(r"\{(#+)\}")


def validate_entry_number_format(template: str) -> str:
    """Check that a template yields unique numbers within and across periods.

    Raises:
        ValidationError: If a year, month or sequence placeholder is missing
    """
    if "{YYYY}" not in template:
        raise ValidationError(f"Entry number format '{template}' needs {{YYYY}}")
    if "{MM}" not in template:
        raise ValidationError(f"Entry number format '{template}' needs {{MM}}")
    if len(_SEQUENCE_RE.findall(template)) != 1:
        raise ValidationError(
            f"Entry number format '{template}' needs exactly one {{#...}} sequence"
        )
    return template


def format_entry_number(template: str, entry_date: date, sequence: int) -> str:
    """Render an entry number for a date and its period sequence value."""
    validate_entry_number_format(template)
    number = (
        template.replace("{YYYY}", f"{entry_date.year:04d}")
        .replace("{YY}", f"{entry_date.year % 100:02d}")
        .replace("{MM}", f"{entry_date.month:02d}")
    )
    return _SEQUENCE_RE.sub(lambda m: f"{sequence:0{len(m.group(1))}d}", number)
