"""Presentation attributes derived from a node's shape and colour."""

from typing import Dict

DEFAULT_COLOR = "#667eea"

SHAPES = ("default", "rounded", "diamond", "circle", "parallelogram")

# Shape-specific attributes layered over the base style
_SHAPE_STYLES: Dict[str, Dict[str, str]] = {
    "default": {"borderRadius": "6px"},
    "rounded": {"borderRadius": "20px"},
    "diamond": {"borderRadius": "4px", "transform": "rotate(45deg)"},
    "circle": {"borderRadius": "50%", "width": "100px", "height": "100px"},
    "parallelogram": {"borderRadius": "4px", "transform": "skewX(-20deg)"},
}


def derive_style(shape: str, color: str) -> Dict[str, str]:
    """
    Compute the style dict for a node.

    Unknown shapes fall back to "default". A fresh dict is returned on every
    call so callers may mutate it freely.
    """
    style = {"background": color, "color": "white", "border": "none"}
    style.update(_SHAPE_STYLES.get(shape, _SHAPE_STYLES["default"]))
    return style
