#!/usr/bin/env python3
"""
Net visualization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from axiom.core.specs import NetDefinition


def to_mermaid(net: "NetDefinition") -> str:
    """Render a net definition as a Mermaid flowchart.

    Places are circles (sinks double circles), transitions are boxes
    labelled with their priority.
    """
    lines = ["graph TD"]
    indent = "    "

    for place in net.places:
        label = place.name
        if place.is_source:
            label = f"[SOURCE]</br>{label}"
        if place.is_sink:
            lines.append(f'{indent}{place.id}((("{label}")))')
        else:
            lines.append(f'{indent}{place.id}(("{label}"))')

    for transition in net.transitions:
        lines.append(f'{indent}{transition.id}["{transition.name}</br>priority={transition.priority}"]')

    for transition in net.transitions:
        for place_id in transition.input_places:
            lines.append(f"{indent}{place_id} --> {transition.id}")
        for place_id in transition.output_places:
            lines.append(f"{indent}{transition.id} --> {place_id}")

    return "\n".join(lines)
