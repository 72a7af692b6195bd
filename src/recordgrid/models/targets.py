"""Target object variants for the in-memory host.

These are the objects that committed cell edits mutate. A real host plugs in
its own document model; this one mirrors the shapes a drawing database
exposes (entities with geometry, named table records, layouts) so the apply
handlers and the commit pipeline can run end to end.

Angles are stored in radians; handlers accept degrees from the grid.
"""

from __future__ import annotations

from dataclasses import dataclass, field

Point3 = tuple[float, float, float]

MODEL_LAYOUT_NAME = "Model"


@dataclass(eq=False)
class DbObject:
    """Base of everything that lives in a Document and has a handle."""

    handle: str = ""
    document: Document | None = field(default=None, repr=False)


@dataclass(eq=False)
class Entity(DbObject):
    layer: str = "0"
    color: int = 256  # ByLayer
    linetype: str = "ByLayer"
    xdata: dict[str, str] = field(default_factory=dict)
    extension_dict: dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class TextEntity(Entity):
    text_string: str = ""
    position: Point3 = (0.0, 0.0, 0.0)
    height: float = 2.5
    width_factor: float = 1.0
    rotation: float = 0.0


@dataclass(eq=False)
class MTextEntity(Entity):
    contents: str = ""
    location: Point3 = (0.0, 0.0, 0.0)
    text_height: float = 2.5
    width: float = 0.0
    rotation: float = 0.0


@dataclass(eq=False)
class DimensionEntity(Entity):
    dimension_text: str = ""


@dataclass(eq=False)
class Circle(Entity):
    center: Point3 = (0.0, 0.0, 0.0)
    radius: float = 1.0


@dataclass(eq=False)
class Arc(Entity):
    center: Point3 = (0.0, 0.0, 0.0)
    radius: float = 1.0
    start_angle: float = 0.0
    end_angle: float = 0.0


@dataclass(eq=False)
class Line(Entity):
    start: Point3 = (0.0, 0.0, 0.0)
    end: Point3 = (0.0, 0.0, 0.0)

    @property
    def midpoint(self) -> Point3:
        return (
            (self.start[0] + self.end[0]) / 2,
            (self.start[1] + self.end[1]) / 2,
            (self.start[2] + self.end[2]) / 2,
        )


@dataclass(eq=False)
class Polyline(Entity):
    vertices: list[Point3] = field(default_factory=list)

    @property
    def extents_center(self) -> Point3:
        """Center of the bounding box of all vertices."""
        if not self.vertices:
            return (0.0, 0.0, 0.0)
        xs, ys, zs = zip(*self.vertices)
        return ((min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2, (min(zs) + max(zs)) / 2)


@dataclass(eq=False)
class Ellipse(Entity):
    center: Point3 = (0.0, 0.0, 0.0)


@dataclass(eq=False)
class BlockDefinition(DbObject):
    name: str = ""


@dataclass(eq=False)
class BlockReference(Entity):
    definition: BlockDefinition | None = None
    position: Point3 = (0.0, 0.0, 0.0)
    scale: Point3 = (1.0, 1.0, 1.0)
    rotation: float = 0.0
    attributes: dict[str, str] = field(default_factory=dict)  # tag -> text


@dataclass(eq=False)
class Layout(DbObject):
    name: str = ""
    paper_size: str = ""
    plot_style_table: str = "None"
    plot_device: str = ""

    @property
    def is_model(self) -> bool:
        return self.name.lower() == MODEL_LAYOUT_NAME.lower()


@dataclass(eq=False)
class SymbolRecord(DbObject):
    """Named table record (text style, linetype, dim style, UCS, ...)."""

    name: str = ""


@dataclass(eq=False)
class LayerRecord(SymbolRecord):
    color: int = 7
    is_frozen: bool = False
    is_locked: bool = False
    is_off: bool = False
    is_plottable: bool = True
    description: str = ""


class Document:
    """In-memory drawing database: objects by handle plus name tables."""

    def __init__(self, path: str):
        self.path = path
        self._objects: dict[str, DbObject] = {}
        self._next_handle = 0x100

    def __repr__(self) -> str:
        return f"Document({self.path!r}, {len(self._objects)} objects)"

    def add(self, obj: DbObject) -> DbObject:
        """Add an object, assigning a hex handle if it has none."""
        if not obj.handle:
            obj.handle = format(self._next_handle, "X")
            self._next_handle += 1
        obj.document = self
        self._objects[obj.handle.upper()] = obj
        return obj

    def get(self, handle: str) -> DbObject | None:
        return self._objects.get(str(handle).upper())

    def objects(self) -> list[DbObject]:
        return list(self._objects.values())

    def block_names(self) -> set[str]:
        return {o.name.lower() for o in self._objects.values() if isinstance(o, BlockDefinition)}

    def layout_names(self) -> set[str]:
        return {o.name.lower() for o in self._objects.values() if isinstance(o, Layout)}

    def has_block(self, name: str) -> bool:
        return name.lower() in self.block_names()

    def has_layout(self, name: str) -> bool:
        return name.lower() in self.layout_names()
