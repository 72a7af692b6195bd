"""Built-in apply handlers for the in-memory target variants.

Each handler turns a (column, new value) edit into a mutation of one target
variant. Handlers raise ValueError for values they can't interpret; the
commit pipeline records that as a per-edit failure.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..filters import parse_number
from ..models.constants import ATTRIBUTE_PREFIX, EXT_DICT_PREFIX, XDATA_PREFIX
from ..models.targets import (
    Arc,
    BlockDefinition,
    BlockReference,
    Circle,
    DimensionEntity,
    Ellipse,
    Entity,
    LayerRecord,
    Layout,
    Line,
    MTextEntity,
    Polyline,
    SymbolRecord,
    TextEntity,
)
from .handler_registry import HandlerRegistry

if TYPE_CHECKING:
    from ..models.targets import Document, Point3

NO_PLOT_STYLE = "None"
PLOT_STYLE_EXTENSIONS = (".ctb", ".stb")

TRUE_VALUES = frozenset({"true", "1", "yes", "y", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "n", "off"})

AXES = {"centerx": 0, "centery": 1, "centerz": 2, "scalex": 0, "scaley": 1, "scalez": 2}


# --- Value helpers ---


def parse_float(value: str, column: str) -> float:
    number = parse_number(value)
    if number is None:
        raise ValueError(f"{column}: '{value}' is not a number")
    return number


def parse_positive(value: str, column: str) -> float:
    number = parse_float(value, column)
    if number <= 0:
        raise ValueError(f"{column}: value must be positive, got {value}")
    return number


def parse_bool(value: str, column: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"{column}: '{value}' is not a boolean")


def with_axis(point: Point3, axis: int, value: float) -> Point3:
    coords = list(point)
    coords[axis] = value
    return tuple(coords)


def offset_point(point: Point3, offset: Point3) -> Point3:
    return (point[0] + offset[0], point[1] + offset[1], point[2] + offset[2])


def axis_offset(current: Point3, axis: int, value: float) -> Point3:
    """Displacement that moves current's coordinate on axis to value."""
    return with_axis((0.0, 0.0, 0.0), axis, value - current[axis])


def unique_name(name: str, taken: set[str]) -> str:
    """Append _1, _2, ... until name is not in taken (case-insensitive)."""
    candidate = name
    counter = 1
    while candidate.lower() in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    return candidate


def require_document(target) -> Document:
    if target.document is None:
        raise ValueError(f"{type(target).__name__} {target.handle} is not in a document")
    return target.document


# --- Registry ---


def register_default_handlers(registry: HandlerRegistry) -> HandlerRegistry:
    """Register the built-in handlers on a registry and return it."""

    # Entity properties

    @registry.register("layer", Entity)
    def apply_layer(target, column, value, siblings):
        target.layer = value

    @registry.register("color", Entity)
    def apply_color(target, column, value, siblings):
        try:
            target.color = int(value)
        except ValueError:
            raise ValueError(f"{column}: '{value}' is not a color index") from None

    @registry.register("linetype", Entity)
    def apply_linetype(target, column, value, siblings):
        target.linetype = value

    # Text content

    @registry.register(["contents", "name"], TextEntity)
    def apply_text_string(target, column, value, siblings):
        target.text_string = value

    @registry.register(["contents", "name"], MTextEntity)
    def apply_mtext_contents(target, column, value, siblings):
        target.contents = value

    @registry.register("contents", DimensionEntity)
    def apply_dimension_text(target, column, value, siblings):
        target.dimension_text = value

    # Renames

    @registry.register(["name", "layout"], Layout)
    def apply_layout_name(target, column, value, siblings):
        if target.is_model:
            raise ValueError("The Model layout can't be renamed")
        if value.lower() == target.name.lower():
            return
        target.name = unique_name(value, require_document(target).layout_names())

    @registry.register("name", BlockReference)
    def apply_block_name(target, column, value, siblings):
        definition = target.definition
        if definition is None:
            raise ValueError("Block reference has no definition")
        if value.lower() == definition.name.lower():
            return
        definition.name = unique_name(value, require_document(target).block_names())

    @registry.register("dynamicblockname", BlockReference)
    def apply_block_swap(target, column, value, siblings):
        """Point the reference at another existing block definition."""
        document = require_document(target)
        for obj in document.objects():
            if isinstance(obj, BlockDefinition) and obj.name.lower() == value.lower():
                target.definition = obj
                return
        raise ValueError(f"Block '{value}' does not exist; only existing blocks can be swapped in")

    @registry.register("name", SymbolRecord)
    def apply_record_name(target, column, value, siblings):
        target.name = value

    # Layer records

    @registry.register("color", LayerRecord)
    def apply_layer_color(target, column, value, siblings):
        try:
            target.color = int(value)
        except ValueError:
            raise ValueError(f"{column}: '{value}' is not a color index") from None

    @registry.register(["isfrozen", "islocked", "isoff", "isplottable"], LayerRecord)
    def apply_layer_flag(target, column, value, siblings):
        attribute = {
            "isfrozen": "is_frozen",
            "islocked": "is_locked",
            "isoff": "is_off",
            "isplottable": "is_plottable",
        }[column.lower()]
        setattr(target, attribute, parse_bool(value, column))

    @registry.register("description", LayerRecord)
    def apply_layer_description(target, column, value, siblings):
        target.description = value

    # Plot settings

    @registry.register("papersize", Layout)
    def apply_paper_size(target, column, value, siblings):
        if not value:
            raise ValueError("Paper size can't be empty")
        if not target.plot_device:
            raise ValueError("No plotter device configured for paper size change")
        target.paper_size = value

    @registry.register("plotstyletable", Layout)
    def apply_plot_style_table(target, column, value, siblings):
        style = value.strip()
        if not style or style.lower() == NO_PLOT_STYLE.lower():
            style = NO_PLOT_STYLE
        elif not style.lower().endswith(PLOT_STYLE_EXTENSIONS):
            style = f"{style}.ctb"
        target.plot_style_table = style

    @registry.register("plotconfigurationname", Layout)
    def apply_plot_device(target, column, value, siblings):
        target.plot_device = value

    # Geometry

    @registry.register(["centerx", "centery", "centerz"], Circle)
    @registry.register(["centerx", "centery", "centerz"], Arc)
    @registry.register(["centerx", "centery", "centerz"], Ellipse)
    def apply_center(target, column, value, siblings):
        number = parse_float(value, column)
        target.center = with_axis(target.center, AXES[column.lower()], number)

    @registry.register("radius", Circle)
    @registry.register("radius", Arc)
    def apply_radius(target, column, value, siblings):
        target.radius = parse_positive(value, column)

    @registry.register(["centerx", "centery", "centerz"], Line)
    def apply_line_center(target, column, value, siblings):
        offset = axis_offset(target.midpoint, AXES[column.lower()], parse_float(value, column))
        target.start = offset_point(target.start, offset)
        target.end = offset_point(target.end, offset)

    @registry.register("rotation", Line)
    def apply_line_rotation(target, column, value, siblings):
        """Rotate the line about its midpoint by the given angle in degrees."""
        angle = math.radians(parse_float(value, column))
        cx, cy, _ = target.midpoint
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        def rotate(point: Point3) -> Point3:
            dx, dy = point[0] - cx, point[1] - cy
            return (cx + dx * cos_a - dy * sin_a, cy + dx * sin_a + dy * cos_a, point[2])

        target.start = rotate(target.start)
        target.end = rotate(target.end)

    @registry.register(["centerx", "centery", "centerz"], Polyline)
    def apply_polyline_center(target, column, value, siblings):
        number = parse_float(value, column)
        offset = axis_offset(target.extents_center, AXES[column.lower()], number)
        target.vertices = [offset_point(vertex, offset) for vertex in target.vertices]

    @registry.register(["centerx", "centery", "centerz"], BlockReference)
    @registry.register(["centerx", "centery", "centerz"], TextEntity)
    def apply_position(target, column, value, siblings):
        number = parse_float(value, column)
        target.position = with_axis(target.position, AXES[column.lower()], number)

    @registry.register(["scalex", "scaley", "scalez"], BlockReference)
    def apply_block_scale(target, column, value, siblings):
        number = parse_positive(value, column)
        target.scale = with_axis(target.scale, AXES[column.lower()], number)

    @registry.register("rotation", BlockReference)
    @registry.register("rotation", TextEntity)
    @registry.register("rotation", MTextEntity)
    def apply_rotation(target, column, value, siblings):
        target.rotation = math.radians(parse_float(value, column))

    @registry.register("textheight", TextEntity)
    def apply_text_height(target, column, value, siblings):
        target.height = parse_positive(value, column)

    @registry.register("widthfactor", TextEntity)
    def apply_width_factor(target, column, value, siblings):
        target.width_factor = parse_positive(value, column)

    @registry.register(["centerx", "centery", "centerz"], MTextEntity)
    def apply_mtext_location(target, column, value, siblings):
        number = parse_float(value, column)
        target.location = with_axis(target.location, AXES[column.lower()], number)

    @registry.register("textheight", MTextEntity)
    def apply_mtext_height(target, column, value, siblings):
        target.text_height = parse_positive(value, column)

    @registry.register("width", MTextEntity)
    def apply_mtext_width(target, column, value, siblings):
        target.width = parse_positive(value, column)

    # Dynamic column families

    @registry.register_prefix(ATTRIBUTE_PREFIX, BlockReference)
    def apply_attribute(target, column, value, siblings):
        tag = column[len(ATTRIBUTE_PREFIX) :].lower()
        for existing in target.attributes:
            if existing.lower() == tag:
                target.attributes[existing] = value
                return
        raise ValueError(f"Attribute '{column[len(ATTRIBUTE_PREFIX):]}' not found in block")

    @registry.register_prefix(XDATA_PREFIX, Entity)
    def apply_xdata(target, column, value, siblings):
        target.xdata[column[len(XDATA_PREFIX) :]] = value

    @registry.register_prefix(EXT_DICT_PREFIX, Entity)
    def apply_extension_dict(target, column, value, siblings):
        target.extension_dict[column[len(EXT_DICT_PREFIX) :]] = value

    return registry


def default_registry() -> HandlerRegistry:
    """Create a registry with the built-in handlers."""
    return register_default_handlers(HandlerRegistry())
