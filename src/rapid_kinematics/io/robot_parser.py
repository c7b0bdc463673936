"""Robot definition parser for loading robot models into JAX-native data structures.

A robot definition is a small XML document describing the zero pose of a
6-axis robot:

.. code-block:: xml

    <robot name="IRB4600-20/2.50">
      <base><mesh vertices="..." faces="..."/></base>
      <axis index="1">
        <frame origin="0 0 0" zaxis="0 0 1"/>
        <limits min="-180" max="180"/>
      </axis>
      ...
      <mounting origin="1580 0 1765" zaxis="1 0 0"/>
      <tool name="tool0" mass="0.001">
        <attachment origin="0 0 0" zaxis="0 0 1"/>
        <tcp origin="0 0 0" zaxis="0 0 1"/>
      </tool>
      <external_axis type="linear" name="track">
        <frame origin="0 0 0" zaxis="1 0 0"/>
        <limits min="0" max="4000"/>
      </external_axis>
    </robot>

Frames take an ``origin`` and a ``zaxis`` and optionally an ``xaxis``.
"""

from typing import List, Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
from lxml import etree

from ..core import (
    AxisLimits,
    ExternalAxis,
    ExternalLinearAxis,
    ExternalRotationalAxis,
    Mesh,
    RobotModel,
    RobotTool,
)
from ..core.joint_position import NUM_INTERNAL_AXES
from ..transforms import frames
from ..util.logger import log_error

Array = jax.Array


def load_robot(path: str, position_plane: Optional[Array] = None, tool: Optional[RobotTool] = None,
               external_axes: Sequence[ExternalAxis] = ()) -> RobotModel:
    """Load a robot definition file and convert it to a RobotModel.

    Args:
        path: Path to the XML robot definition.
        position_plane: World frame of the robot base. Defaults to world XY.
        tool: Tool to mount. Overrides the tool of the file.
        external_axes: Axes attached in addition to the ones in the file.

    Returns:
        RobotModel: The robot at ``position_plane``.

    Raises:
        ValueError: If the file is not a valid robot definition.
    """
    try:
        tree = etree.parse(path)
    except (OSError, etree.XMLSyntaxError) as e:
        log_error(f"Could not read robot definition {path}: {e}")
    return parse_robot(tree.getroot(), position_plane, tool, external_axes)


def load_robot_from_string(text: str, position_plane: Optional[Array] = None,
                           tool: Optional[RobotTool] = None,
                           external_axes: Sequence[ExternalAxis] = ()) -> RobotModel:
    """Same as :py:func:`load_robot` for an in-memory document."""
    try:
        root = etree.fromstring(text.encode("utf-8") if isinstance(text, str) else text)
    except etree.XMLSyntaxError as e:
        log_error(f"Could not parse robot definition: {e}")
    return parse_robot(root, position_plane, tool, external_axes)


def parse_robot(root, position_plane: Optional[Array] = None, tool: Optional[RobotTool] = None,
                external_axes: Sequence[ExternalAxis] = ()) -> RobotModel:
    """Build a RobotModel from a parsed ``<robot>`` element."""
    if root.tag != "robot":
        log_error(f"Expected a <robot> root element, found <{root.tag}>")
    name = root.get("name")
    if not name:
        log_error("The <robot> element needs a name")

    # Internal axes, ordered by their index attribute
    axis_elems = root.findall("axis")
    if len(axis_elems) != NUM_INTERNAL_AXES:
        log_error(f"Robot {name} needs exactly {NUM_INTERNAL_AXES} <axis> elements, found {len(axis_elems)}")
    axis_elems = sorted(axis_elems, key=lambda elem: _parse_int(elem, "index"))
    indices = [_parse_int(elem, "index") for elem in axis_elems]
    if indices != list(range(1, NUM_INTERNAL_AXES + 1)):
        log_error(f"Axis indices of robot {name} must be 1..{NUM_INTERNAL_AXES}, found {indices}")

    axis_planes = []
    axis_limits = []
    link_meshes = []
    for axis_elem in axis_elems:
        axis_planes.append(_parse_frame(_required(axis_elem, "frame")))
        axis_limits.append(_parse_limits(_required(axis_elem, "limits")))
        link_meshes.append(_parse_optional_mesh(axis_elem))

    base_elem = root.find("base")
    base_mesh = _parse_optional_mesh(base_elem) if base_elem is not None else Mesh.empty()
    mounting_frame = _parse_frame(_required(root, "mounting"))

    if tool is None:
        tool_elem = root.find("tool")
        tool = _parse_tool(tool_elem) if tool_elem is not None else RobotTool.default()

    axes: List[ExternalAxis] = [_parse_external_axis(elem) for elem in root.findall("external_axis")]
    axes.extend(external_axes)

    return RobotModel.create(
        name=name,
        axis_planes=axis_planes,
        axis_limits=axis_limits,
        mounting_frame=mounting_frame,
        base_plane=position_plane,
        meshes=[base_mesh] + link_meshes,
        tool=tool,
        external_axes=axes,
    )


def _required(parent, tag: str):
    elem = parent.find(tag)
    if elem is None:
        log_error(f"<{parent.tag}> is missing its <{tag}> element")
    return elem


def _parse_int(elem, attribute: str) -> int:
    try:
        return int(elem.get(attribute))
    except (TypeError, ValueError):
        log_error(f"<{elem.tag}> needs an integer '{attribute}' attribute")


def _parse_float(elem, attribute: str, default: Optional[float] = None) -> float:
    text = elem.get(attribute)
    if text is None and default is not None:
        return default
    try:
        return float(text)
    except (TypeError, ValueError):
        log_error(f"<{elem.tag}> needs a numeric '{attribute}' attribute")


def _parse_vector(elem, attribute: str, size: int = 3) -> Optional[np.ndarray]:
    text = elem.get(attribute)
    if text is None:
        return None
    try:
        values = np.array([float(x) for x in text.split()])
    except ValueError:
        log_error(f"<{elem.tag}> attribute '{attribute}' must hold numbers, got '{text}'")
    if values.shape != (size,):
        log_error(f"<{elem.tag}> attribute '{attribute}' must hold {size} numbers, got '{text}'")
    return values


def _parse_frame(elem) -> Array:
    origin = _parse_vector(elem, "origin")
    zaxis = _parse_vector(elem, "zaxis")
    xaxis = _parse_vector(elem, "xaxis")
    if origin is None:
        origin = np.zeros(3)
    if zaxis is None:
        zaxis = np.array([0.0, 0.0, 1.0])
    if np.linalg.norm(zaxis) == 0.0:
        log_error(f"<{elem.tag}> has a zero length z-axis")
    if xaxis is None:
        return frames.from_origin_and_normal(origin, zaxis)
    if np.linalg.norm(np.cross(zaxis, xaxis)) == 0.0:
        log_error(f"<{elem.tag}> has parallel x and z axes")
    return frames.from_origin_and_axes(origin, xaxis, np.cross(zaxis, xaxis))


def _parse_limits(elem) -> AxisLimits:
    lower = _parse_float(elem, "min")
    upper = _parse_float(elem, "max")
    if lower > upper:
        log_error(f"<limits> min {lower} is larger than max {upper}")
    return AxisLimits(lower, upper)


def _parse_mesh(elem) -> Mesh:
    try:
        vertices = [float(x) for x in elem.get("vertices", "").split()]
        faces = [int(x) for x in elem.get("faces", "").split()]
    except ValueError:
        log_error("<mesh> vertices must be numbers and faces must be integers")
    if len(vertices) % 3 or len(faces) % 3:
        log_error("<mesh> vertices and faces must come in triples")
    if faces and max(faces) >= len(vertices) // 3:
        log_error("<mesh> face index out of range")
    return Mesh.from_lists(vertices, faces)


def _parse_optional_mesh(parent, tag: str = "mesh") -> Mesh:
    elem = parent.find(tag)
    if elem is None:
        return Mesh.empty()
    return _parse_mesh(elem)


def _parse_tool(elem) -> RobotTool:
    name = elem.get("name")
    if not name:
        log_error("<tool> needs a name")
    attachment = elem.find("attachment")
    tcp = elem.find("tcp")
    return RobotTool.create(
        name=name,
        attachment_plane=_parse_frame(attachment) if attachment is not None else None,
        tool_plane=_parse_frame(tcp) if tcp is not None else None,
        mesh=_parse_optional_mesh(elem),
        mass=_parse_float(elem, "mass", default=0.001),
    )


def _parse_external_axis(elem) -> ExternalAxis:
    axis_type = elem.get("type")
    name = elem.get("name", "")
    axis_plane = _parse_frame(_required(elem, "frame"))
    limits = _parse_limits(_required(elem, "limits"))
    axis_number = _parse_int(elem, "axis_number") if elem.get("axis_number") is not None else -1
    moves_robot = elem.get("moves_robot", "false").lower() == "true"
    base_mesh = _parse_optional_mesh(elem, "base_mesh")
    link_mesh = _parse_optional_mesh(elem, "link_mesh")

    if axis_type == "linear":
        attachment = elem.find("attachment")
        return ExternalLinearAxis(
            name, axis_plane, limits, base_mesh, link_mesh,
            attachment_plane=_parse_frame(attachment) if attachment is not None else jnp.array(axis_plane),
            axis_number=axis_number, moves_robot=moves_robot)
    if axis_type == "rotational":
        return ExternalRotationalAxis(
            name, axis_plane, limits, base_mesh, link_mesh,
            axis_number=axis_number, moves_robot=moves_robot)
    log_error(f"<external_axis> type must be 'linear' or 'rotational', got '{axis_type}'")
