"""Intrinsic bounds of an SVG document.

Resolution order:
1. ``viewBox`` (x, y, width, height)
2. explicit ``width``/``height`` attributes
3. tight bounding box over the content geometry

The geometry pass understands basic shapes, paths and text, with
``translate``/``scale`` transforms. Other transforms are ignored.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from dumplens.utils.logging import get_logger

from .vector import local_name, parse_svg

logger = get_logger(__name__)

Point = Tuple[float, float]
# (sx, sy, tx, ty): maps (x, y) to (sx*x + tx, sy*y + ty)
Affine = Tuple[float, float, float, float]

_IDENTITY: Affine = (1.0, 1.0, 0.0, 0.0)
_NUMBER = r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?"
_NUMBER_RE = re.compile(_NUMBER)
_LENGTH_RE = re.compile(rf"^\s*({_NUMBER})\s*(px|pt|)\s*$")
_TRANSFORM_RE = re.compile(r"(\w+)\s*\(([^)]*)\)")
_PATH_TOKEN_RE = re.compile(rf"[MmLlHhVvCcSsQqTtAaZz]|{_NUMBER}")
_PATH_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}
_NON_RENDERED = {"defs", "clipPath", "mask", "title", "desc", "style", "metadata", "symbol"}
_TEXT_WIDTH_FACTOR = 0.6
_DEFAULT_FONT_SIZE = 14.0


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in SVG user units."""
    x: float
    y: float
    width: float
    height: float

    def padded(self, padding: float) -> "Bounds":
        return Bounds(
            x=self.x - padding,
            y=self.y - padding,
            width=self.width + 2 * padding,
            height=self.height + 2 * padding,
        )

    @classmethod
    def from_points(cls, points: List[Point]) -> Optional["Bounds"]:
        if not points:
            return None
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))


def _parse_length(value: Optional[str]) -> Optional[float]:
    """Parse a length in user units, px or pt. Percentages and other units yield None."""
    if value is None:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


def _numbers(value: Optional[str]) -> List[float]:
    if not value:
        return []
    return [float(n) for n in _NUMBER_RE.findall(value)]


def _float_attr(element: ET.Element, name: str, default: float = 0.0) -> float:
    parsed = _parse_length(element.get(name))
    return default if parsed is None else parsed


def _viewbox_bounds(root: ET.Element) -> Optional[Bounds]:
    values = _numbers(root.get("viewBox"))
    if len(values) != 4 or values[2] <= 0 or values[3] <= 0:
        return None
    return Bounds(*values)


def _attribute_bounds(root: ET.Element) -> Optional[Bounds]:
    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    if not width or not height or width <= 0 or height <= 0:
        return None
    return Bounds(0.0, 0.0, width, height)


def _compose(outer: Affine, inner: Affine) -> Affine:
    osx, osy, otx, oty = outer
    isx, isy, itx, ity = inner
    return (osx * isx, osy * isy, osx * itx + otx, osy * ity + oty)


def _parse_transform(value: Optional[str]) -> Affine:
    result = _IDENTITY
    if not value:
        return result
    for name, args in _TRANSFORM_RE.findall(value):
        params = _numbers(args)
        if name == "translate" and params:
            step = (1.0, 1.0, params[0], params[1] if len(params) > 1 else 0.0)
        elif name == "scale" and params:
            step = (params[0], params[1] if len(params) > 1 else params[0], 0.0, 0.0)
        else:
            logger.debug(f"Ignoring unsupported SVG transform '{name}'")
            continue
        result = _compose(result, step)
    return result


def _apply(affine: Affine, point: Point) -> Point:
    sx, sy, tx, ty = affine
    return (sx * point[0] + tx, sy * point[1] + ty)


def _path_points(d: str) -> List[Point]:
    """Endpoints and control points of a path.

    The control-point hull contains the curve, so the result is a slightly
    loose but safe bounding set.
    """
    points: List[Point] = []
    tokens = _PATH_TOKEN_RE.findall(d or "")
    current = (0.0, 0.0)
    start = (0.0, 0.0)
    command: Optional[str] = None
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            command = token
            i += 1
            if command in "Zz":
                current = start
                points.append(current)
                command = None
            continue
        if command is None:
            break

        upper = command.upper()
        relative = command.islower()
        arity = _PATH_ARITY[upper]
        params = [float(t) for t in tokens[i:i + arity]]
        if len(params) < arity:
            break
        i += arity

        ox, oy = current if relative else (0.0, 0.0)
        if upper == "H":
            current = (params[0] + ox, current[1])
            points.append(current)
        elif upper == "V":
            current = (current[0], params[0] + oy)
            points.append(current)
        elif upper == "A":
            current = (params[5] + ox, params[6] + oy)
            points.append(current)
        else:
            pairs = [(params[k] + ox, params[k + 1] + oy) for k in range(0, arity, 2)]
            points.extend(pairs)
            current = pairs[-1]

        if upper == "M":
            start = current
            # Further pairs after a moveto are implicit linetos
            command = "l" if relative else "L"

    return points


def _text_points(element: ET.Element) -> List[Point]:
    x = _float_attr(element, "x")
    y = _float_attr(element, "y")
    font_size = _parse_length(element.get("font-size")) or _DEFAULT_FONT_SIZE
    content = "".join(element.itertext())
    width = len(content) * font_size * _TEXT_WIDTH_FACTOR
    anchor = element.get("text-anchor", "start")
    if anchor == "middle":
        left = x - width / 2
    elif anchor == "end":
        left = x - width
    else:
        left = x
    return [(left, y - font_size), (left + width, y)]


def _element_points(element: ET.Element) -> List[Point]:
    tag = local_name(element.tag)
    if tag == "rect":
        x, y = _float_attr(element, "x"), _float_attr(element, "y")
        w, h = _float_attr(element, "width"), _float_attr(element, "height")
        return [(x, y), (x + w, y + h)]
    if tag == "circle":
        cx, cy, r = _float_attr(element, "cx"), _float_attr(element, "cy"), _float_attr(element, "r")
        return [(cx - r, cy - r), (cx + r, cy + r)]
    if tag == "ellipse":
        cx, cy = _float_attr(element, "cx"), _float_attr(element, "cy")
        rx, ry = _float_attr(element, "rx"), _float_attr(element, "ry")
        return [(cx - rx, cy - ry), (cx + rx, cy + ry)]
    if tag == "line":
        return [
            (_float_attr(element, "x1"), _float_attr(element, "y1")),
            (_float_attr(element, "x2"), _float_attr(element, "y2")),
        ]
    if tag in ("polyline", "polygon"):
        values = _numbers(element.get("points"))
        return [(values[k], values[k + 1]) for k in range(0, len(values) - 1, 2)]
    if tag == "path":
        return _path_points(element.get("d", ""))
    if tag == "text":
        return _text_points(element)
    return []


def _walk(element: ET.Element, affine: Affine) -> Iterator[Point]:
    for child in element:
        if not isinstance(child.tag, str) or local_name(child.tag) in _NON_RENDERED:
            continue
        child_affine = _compose(affine, _parse_transform(child.get("transform")))
        for point in _element_points(child):
            yield _apply(child_affine, point)
        if local_name(child.tag) != "text":
            yield from _walk(child, child_affine)


def geometry_bounds(root: ET.Element) -> Optional[Bounds]:
    """Tight bounding box over the content geometry, or None if there is none."""
    return Bounds.from_points(list(_walk(root, _IDENTITY)))


def intrinsic_bounds(svg: Union[str, ET.Element]) -> Bounds:
    """Intrinsic bounds of an SVG document.

    Returns an empty box at the origin when nothing can be determined.
    """
    root = parse_svg(svg) if isinstance(svg, str) else svg
    bounds = _viewbox_bounds(root) or _attribute_bounds(root) or geometry_bounds(root)
    if bounds is None:
        logger.warning("SVG has no viewBox, size attributes or geometry; using empty bounds")
        return Bounds(0.0, 0.0, 0.0, 0.0)
    return bounds
