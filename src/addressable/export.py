"""Text artifacts describing an allocated register map."""

__all__ = (
    "describe",
    "header_name",
    "render_header",
)

import logging
import re

from jinja2 import Template

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = Template("""\
#ifndef {{ guard }}
#define {{ guard }}

// Data width in bits: {{ data_width }}
// Word width in bits: {{ word_width }}
// Words per data transfer: {{ ratio }}

{% for name, offset in offsets %}
#define {{ name }}_OFFSET {{ offset }}
{% endfor %}

#endif /* {{ guard }} */
""", trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)

def header_name(name, prefix=""):
    """Converts a register name into a C preprocessor identifier."""
    ident = re.sub(r"[^0-9A-Za-z]", "_", f"{prefix}{name}").upper()
    if not ident or ident[0].isdigit():
        ident = "_" + ident
    return ident

def render_header(register_map, guard="REGISTER_MAP_H", prefix=""):
    """Renders a C header defining the offset of every register, in allocation order."""
    offsets = [
        (header_name(register.name, prefix), f"0x{register.offset:X}")
        for register in register_map.registers
    ]
    logger.debug(f"Rendering header {guard} with {len(offsets)} offsets")

    return HEADER_TEMPLATE.render(
        guard=header_name(guard),
        data_width=register_map.data_width,
        word_width=register_map.word_width,
        ratio=register_map.ratio,
        offsets=offsets,
    )

def describe(register_map):
    """Formats the register map as a table, one row per register."""
    rows = [("Name", "Width", "Offset", "Id", "Chunks")]
    for register in register_map.registers:
        rows.append((
            register.name,
            str(register.width),
            f"0x{register.offset:X}",
            str(register.id),
            str(register_map.num_chunks(register.width)),
        ))

    widths = [max(len(row[col]) for row in rows) for col in range(len(rows[0]))]
    lines = [
        f"Register Map: data width {register_map.data_width}, word width {register_map.word_width}, "
        f"{register_map.size} words",
    ]
    for row in rows:
        lines.append("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())

    return "\n".join(lines) + "\n"
