"""RAPID program generation.

The generator walks an ordered list of actions three times: a validation
pass that collects warnings, a declaration pass and an instruction pass.
Groups are entered depth-first in order during every pass. Problems with
names or values never stop generation; they are returned as warnings and
logged.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from flax import struct

from ..actions import (
    AbsoluteJointMovement,
    Action,
    ActionType,
    Movement,
    OverrideRobotTool,
    SpeedData,
    WorkObject,
    ZoneData,
    iter_actions,
    tool_to_rapid_declaration,
)
from ..actions.validation import (
    MAX_AXIS_CONFIGURATION,
    VALID_PRECISIONS,
    check_identifier,
    nearest_predefined_speed,
    precision_value_is_valid,
)
from ..core import RobotModel, RobotTool
from ..util.logger import log_debug, log_warn
from .names import NameRegistry

TOOL0_DECLARATION = ("PERS tooldata tool0 := [TRUE, [[0, 0, 0], [1, 0, 0, 0]], "
                     "[0.001, [0, 0, 0.001], [1, 0, 0, 0], 0, 0, 0]];")
WOBJ0_DECLARATION = ("PERS wobjdata wobj0 := [FALSE, TRUE, \"\", [[0, 0, 0], [1, 0, 0, 0]], "
                     "[[0, 0, 0], [1, 0, 0, 0]]];")
LOAD0_DECLARATION = "PERS loaddata load0 := [0.001, [0, 0, 0.001], [1, 0, 0, 0], 0, 0, 0];"


@struct.dataclass
class GeneratorConfig:
    """Layout of the generated modules.

    Attributes:
        module_name: Name of the program module.
        routine_name: Name of the procedure holding the instructions.
        declaration_indent: Prefix of every declaration line.
        instruction_indent: Prefix of every instruction line.
        base_module_header: Write the system data comment header in BASE.sys.
    """
    module_name: str = struct.field(pytree_node=False, default="MainModule")
    routine_name: str = struct.field(pytree_node=False, default="main")
    declaration_indent: str = struct.field(pytree_node=False, default="    ")
    instruction_indent: str = struct.field(pytree_node=False, default="        ")
    base_module_header: bool = struct.field(pytree_node=False, default=True)


@dataclass
class RAPIDProgram:
    """Result of one generation run.

    ``declarations`` and ``instructions`` are indented lines. Joining them
    with the module frame gives ``program_module``.
    """
    module_name: str
    routine_name: str
    declarations: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    base_module: str = ""

    @property
    def program_module(self) -> str:
        lines = [f"MODULE {self.module_name}"]
        lines.extend(self.declarations)
        if self.declarations:
            lines.append("")
        lines.append(f"    PROC {self.routine_name}()")
        lines.extend(self.instructions)
        lines.append("    ENDPROC")
        lines.append("ENDMODULE")
        return "\n".join(lines)

    def to_text(self) -> str:
        return self.program_module


class RAPIDGenerator:
    """Writes a RAPID program module for a robot and a list of actions.

    Actions call back into the generator while they are written: they add
    lines, ask whether a record still needs a declaration and switch or
    report the tool in use.

    Args:
        robot: Robot whose tool is the default tool of every movement.
        actions: Ordered actions of the program.
        module_name: Name of the program module.
        routine_name: Name of the main procedure.
        config: Layout options; overrides ``module_name`` and ``routine_name``.
    """

    def __init__(self, robot: RobotModel, actions: Sequence[Action],
                 module_name: str = "MainModule", routine_name: str = "main",
                 config: Optional[GeneratorConfig] = None):
        self.robot = robot
        self.actions = list(actions)
        self.config = config if config is not None else GeneratorConfig(module_name, routine_name)
        self.program: Optional[RAPIDProgram] = None

        self._checks: Dict[ActionType, Callable[[Action], None]] = {
            ActionType.MOVEMENT: self._check_movement,
            ActionType.ABSOLUTE_JOINT_MOVEMENT: self._check_absolute_joint_movement,
            ActionType.DIGITAL_OUTPUT: self._check_nothing,
            ActionType.WAIT_TIME: self._check_nothing,
            ActionType.WAIT_DI: self._check_nothing,
            ActionType.COMMENT: self._check_nothing,
            ActionType.CODE_LINE: self._check_nothing,
            ActionType.OVERRIDE_ROBOT_TOOL: self._check_override_robot_tool,
            ActionType.ACTION_GROUP: self._check_nothing,
        }
        self._reset()

    @property
    def module_name(self) -> str:
        return self.config.module_name

    @property
    def routine_name(self) -> str:
        return self.config.routine_name

    @property
    def current_tool(self) -> RobotTool:
        return self._current_tool

    @property
    def warnings(self) -> List[str]:
        return list(self._warnings)

    def _reset(self):
        self._names = NameRegistry()
        self._declared = NameRegistry()
        self._declarations: List[str] = []
        self._instructions: List[str] = []
        self._warnings: List[str] = []
        self._warned: set = set()
        self._checked_identifiers: set = set()
        self._current_tool = self.robot.tool
        self._tools: Dict[str, RobotTool] = {}
        self._work_objects: Dict[str, WorkObject] = {}

    # Generation
    def generate(self) -> RAPIDProgram:
        """Validate the actions and write both blocks of the program module."""
        self._reset()

        for action in iter_actions(self.actions):
            self._check(action)
        if self._names.collisions:
            log_debug(f"Names claimed by more than one object: {', '.join(self._names.collisions)}")

        for action in self.actions:
            self.write_declaration(action)

        self._current_tool = self.robot.tool
        self.record_tool(self.robot.tool)
        for action in self.actions:
            self.write_instruction(action)

        self.program = RAPIDProgram(
            module_name=self.module_name,
            routine_name=self.routine_name,
            declarations=list(self._declarations),
            instructions=list(self._instructions),
            warnings=list(self._warnings),
            base_module=self._base_module_text(),
        )
        log_debug(f"Generated module {self.module_name}: {len(self._declarations)} declaration lines, "
                  f"{len(self._instructions)} instruction lines, {len(self._warnings)} warnings")
        return self.program

    def create_program_module(self) -> str:
        return self._generated().program_module

    def create_base_module(self) -> str:
        """BASE system module with tooldata and wobjdata of every tool and work object used."""
        return self._generated().base_module

    def _generated(self) -> RAPIDProgram:
        if self.program is None:
            return self.generate()
        return self.program

    def _base_module_text(self) -> str:
        indent = self.config.declaration_indent
        lines = ["MODULE BASE (SYSMODULE, NOSTEPIN, VIEW)", ""]
        if self.config.base_module_header:
            lines += [indent + "! System module with basic predefined system data",
                      indent + "!************************************************",
                      "",
                      indent + "! System data tool0, wobj0 and load0",
                      indent + "! Do not translate or delete tool0, wobj0, load0"]
        lines += [indent + TOOL0_DECLARATION, indent + WOBJ0_DECLARATION, indent + LOAD0_DECLARATION, ""]

        tools = [tool for name, tool in self._tools.items() if name != "tool0"]
        if tools:
            lines.append(indent + "! User defined tooldata")
            lines += [indent + tool_to_rapid_declaration(tool) for tool in tools]
            lines.append("")

        work_objects = [wobj for name, wobj in self._work_objects.items() if name != "wobj0"]
        if work_objects:
            lines.append(indent + "! User defined wobjdata")
            lines += [indent + wobj.to_rapid_declaration() for wobj in work_objects]
            lines.append("")

        lines.append("ENDMODULE")
        return "\n".join(lines)

    # Protocol used by the actions
    def add_declaration(self, text: str):
        for line in text.splitlines():
            self._declarations.append(self.config.declaration_indent + line)

    def add_instruction(self, text: str):
        for line in text.splitlines():
            self._instructions.append(self.config.instruction_indent + line)

    def write_declaration(self, action: Action):
        if self._skipped(action):
            return
        action.write_rapid_declaration(self)

    def write_instruction(self, action: Action):
        if self._skipped(action):
            return
        action.write_rapid_instruction(self)

    def should_declare(self, name: str, owner: object) -> bool:
        """True the first time ``owner`` is declared under ``name``."""
        return self._declared.claim(name, owner)

    def use_tool(self, tool: RobotTool):
        """Make ``tool`` the tool of the movements that follow."""
        self._current_tool = tool
        self.record_tool(tool)

    def record_tool(self, tool: RobotTool):
        self._tools.setdefault(tool.name, tool)

    def record_work_object(self, work_object: WorkObject):
        self._work_objects.setdefault(work_object.name, work_object)

    def add_warning(self, text: str):
        self._warnings.append(text)
        log_warn(text)

    # Validation
    def _skipped(self, action: Action) -> bool:
        return not action.is_composite and not action.is_valid

    def _check(self, action: Action):
        self._checks[action.action_type](action)
        if self._skipped(action):
            self.add_warning(f"{_label(action)} is not valid and is skipped.")

    def _claim(self, name: str, owner: object) -> bool:
        """Claim a name, warning once per name claimed by different objects."""
        claimed = self._names.claim(name, owner)
        if claimed and len(self._names.owners(name)) > 1 and name not in self._warned:
            self._warned.add(name)
            self.add_warning(f"The name {name} is used more than once.")
        return claimed

    def _check_identifier(self, name: str, label: str):
        if name in self._checked_identifiers:
            return
        self._checked_identifiers.add(name)
        for warning in check_identifier(name, label):
            self.add_warning(warning)

    def _check_speed_data(self, speed_data: Optional[SpeedData]):
        if speed_data is None:
            return
        if speed_data.predefined:
            if not speed_data.exact_predefined_value:
                self.add_warning(
                    f"The predefined speed data value {speed_data.v_tcp} is not valid. "
                    f"The nearest valid predefined speeddata value v{nearest_predefined_speed(speed_data.v_tcp)} "
                    f"is used.")
        elif speed_data.name and self._claim(speed_data.name, speed_data):
            self._check_identifier(speed_data.name, "Speed data")

    def _check_zone_data(self, zone_data: Optional[ZoneData]):
        if zone_data is None:
            return
        if zone_data.predefined:
            if not precision_value_is_valid(zone_data.precision):
                valid = ", ".join(str(p) for p in VALID_PRECISIONS)
                self.add_warning(f"The precision value {zone_data.precision} is not valid. "
                                 f"Valid values are -1 (fine), {valid}.")
        elif zone_data.name and self._claim(zone_data.name, zone_data):
            self._check_identifier(zone_data.name, "Zone data")

    def _check_movement(self, movement: Movement):
        target = movement.target
        if target is not None and target.name and self._claim(target.name, target):
            self._check_identifier(target.name, "Target")
            if not target.axis_configuration_is_valid:
                self.add_warning(f"The axis configuration {target.axis_configuration} of target {target.name} "
                                 f"is not valid. Use a value between 0 and {MAX_AXIS_CONFIGURATION}.")
        self._check_speed_data(movement.speed_data)
        self._check_zone_data(movement.zone_data)
        if not movement.movement_type_is_valid:
            self.add_warning(f"The movement type {int(movement.movement_type)} is not valid. "
                             f"Use 1 (MoveL) or 2 (MoveJ).")

    def _check_absolute_joint_movement(self, movement: AbsoluteJointMovement):
        if movement.name and self._claim(movement.name, movement):
            self._check_identifier(movement.name, "Joint target")
        self._check_speed_data(movement.speed_data)
        self._check_zone_data(movement.zone_data)

    def _check_override_robot_tool(self, action: OverrideRobotTool):
        if action.robot_tool is not None and action.robot_tool.name:
            self._check_identifier(action.robot_tool.name, "Robot tool")

    def _check_nothing(self, action: Action):
        pass


def _label(action: Action) -> str:
    return action.action_type.value.replace("_", " ").capitalize()
