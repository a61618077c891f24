"""Árbol de UI devuelto al endpoint `/app/ui`.

La plataforma renderiza nodos `{type, props, children}`; `props` y
`children` se omiten cuando están vacíos.
"""

from __future__ import annotations

from typing import Any

from core.domain.models import InstanceState

UiNode = dict[str, Any]

_ROW_CLASS = "flex justify-between items-center py-2"


def node(type_: str, props: dict[str, Any] | None = None, *children: Any) -> UiNode:
    out: UiNode = {"type": type_}
    if props:
        out["props"] = props
    if children:
        out["children"] = list(children)
    return out


def domain_list(domains: list[str]) -> list[UiNode]:
    if not domains:
        return [node("Box", {"class": _ROW_CLASS}, "No domains yet.")]
    return [
        node(
            "Box",
            {"class": _ROW_CLASS},
            domain,
            node("Button", {"action": {"type": "delete", "domain": domain}, "variant": "danger"}, "Delete"),
        )
        for domain in domains
    ]


def render_state(state: InstanceState) -> list[UiNode]:
    return [
        node(
            "Box",
            {"class": "flex justify-center"},
            node("Box", {"class": "w-2/5 w-3"}, node("Image", {"src": "static/logo.png"})),
        ),
        *domain_list(state.domains),
        node(
            "Form",
            None,
            node("TextField", {"required": True, "name": "domain"}),
            node("Button", {"submit": True, "variant": "primary", "action": {"type": "add"}}, "Add a domain"),
        ),
    ]
