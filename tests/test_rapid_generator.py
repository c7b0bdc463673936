"""Tests for RAPID program generation."""

import logging

import jax.numpy as jnp
import pytest

from rapid_kinematics.actions import (
    AbsoluteJointMovement,
    ActionGroup,
    ActionType,
    CodeLine,
    CodeType,
    Comment,
    DigitalOutput,
    Movement,
    OverrideRobotTool,
    RobotTarget,
    SpeedData,
    WaitTime,
    WorkObject,
    ZoneData,
)
from rapid_kinematics.rapid import GeneratorConfig, NameRegistry, RAPIDGenerator
from rapid_kinematics.transforms import se3

INSTRUCTION_INDENT = " " * 8
DECLARATION_INDENT = " " * 4


def make_target(name="t1", x=100.0):
    return RobotTarget.create(name, se3.translation(jnp.array([x, 0.0, 500.0])))


def generate(robot, actions, **kwargs):
    return RAPIDGenerator(robot, actions, **kwargs).generate()


# Program structure
def test_empty_program(irb4600):
    """Test program without actions."""
    program = generate(irb4600, [])
    assert program.declarations == []
    assert program.instructions == []
    assert program.warnings == []


def test_named_group_with_digital_output(irb4600):
    """Test named group markers."""
    program = generate(irb4600, [ActionGroup("G1", [DigitalOutput("DO_1", True)])])
    assert program.instructions == [
        INSTRUCTION_INDENT + "! Start of group: G1",
        INSTRUCTION_INDENT + "SetDO DO_1, 1;",
        INSTRUCTION_INDENT + "! End of group: G1",
    ]
    assert program.declarations == []


def test_anonymous_group_has_no_markers(irb4600):
    """Test anonymous groups."""
    program = generate(irb4600, [ActionGroup("", [WaitTime(1.0), ActionGroup("", [WaitTime(2.0)])])])
    assert program.instructions == [INSTRUCTION_INDENT + "WaitTime 1;", INSTRUCTION_INDENT + "WaitTime 2;"]


# Names
def test_duplicate_target_names_warn_and_keep_both_declarations(irb4600):
    """Test duplicate target names."""
    first = Movement(make_target("t1", 100.0))
    second = Movement(make_target("t1", 200.0))
    program = generate(irb4600, [first, second])

    assert program.warnings == ["The name t1 is used more than once."]
    declarations = [line for line in program.declarations if line.startswith(DECLARATION_INDENT + "CONST robtarget t1")]
    assert len(declarations) == 2
    assert declarations[0] == DECLARATION_INDENT + first.target.to_rapid_declaration()
    assert declarations[1] == DECLARATION_INDENT + second.target.to_rapid_declaration()
    assert len(program.instructions) == 2


def test_shared_target_is_declared_once(irb4600):
    """Test shared target declaration."""
    target = make_target()
    program = generate(irb4600, [Movement(target), Movement(target, movement_type=1)])

    assert program.warnings == []
    assert len(program.declarations) == 1
    assert program.instructions == [
        INSTRUCTION_INDENT + "MoveJ t1, v100, z0, tool0\\WObj:=wobj0;",
        INSTRUCTION_INDENT + "MoveL t1, v100, z0, tool0\\WObj:=wobj0;",
    ]


def test_shared_custom_speed_is_declared_once(irb4600):
    """Test shared speed data declaration."""
    speed = SpeedData("slow", 20.0)
    program = generate(irb4600, [Movement(make_target("a"), speed), Movement(make_target("b"), speed)])
    speed_lines = [line for line in program.declarations if "speeddata" in line]
    assert speed_lines == [DECLARATION_INDENT + "VAR speeddata slow := [20, 500, 5000, 1000];"]
    assert program.warnings == []


def test_joint_target_and_target_names_collide(irb4600):
    """Test name collision across data types."""
    program = generate(irb4600, [Movement(make_target("p1")), AbsoluteJointMovement.create("p1", [0.0] * 6)])
    assert program.warnings == ["The name p1 is used more than once."]
    assert len(program.declarations) == 2


def test_override_robot_tool_switches_tool(irb4600, gripper):
    """Test tool override in instructions."""
    actions = [
        Movement(make_target("a")),
        OverrideRobotTool(gripper),
        Movement(make_target("b")),
        AbsoluteJointMovement.create("home", [0.0] * 6),
    ]
    program = generate(irb4600, actions)
    assert program.instructions == [
        INSTRUCTION_INDENT + "MoveJ a, v100, z0, tool0\\WObj:=wobj0;",
        INSTRUCTION_INDENT + "! Default Robot Tool changed to gripper.",
        INSTRUCTION_INDENT + "MoveJ b, v100, z0, gripper\\WObj:=wobj0;",
        INSTRUCTION_INDENT + "MoveAbsJ home, v100, z0, gripper;",
    ]


# Warnings
def test_invalid_actions_are_skipped_and_logged(irb4600, caplog):
    """Test invalid actions are skipped."""
    with caplog.at_level(logging.WARNING, logger="rapid_kinematics"):
        program = generate(irb4600, [DigitalOutput(""), WaitTime(1.0), Movement(make_target(), movement_type=0)])

    assert program.instructions == [INSTRUCTION_INDENT + "WaitTime 1;"]
    assert program.declarations == []
    assert program.warnings == [
        "Digital output is not valid and is skipped.",
        "The movement type 0 is not valid. Use 1 (MoveL) or 2 (MoveJ).",
        "Movement is not valid and is skipped.",
    ]
    logged = [record.getMessage() for record in caplog.records if record.name == "rapid_kinematics"]
    assert logged == program.warnings


def test_value_warnings(irb4600):
    """Test value warnings."""
    target = RobotTarget.create("1st_target", se3.identity(), axis_configuration=9)
    movement = Movement(target, SpeedData.from_value(110), ZoneData.from_precision(3))
    program = generate(irb4600, [movement])

    assert program.warnings == [
        "Target name <1st_target> starts with a number which is not allowed in RAPID code.",
        "The axis configuration 9 of target 1st_target is not valid. Use a value between 0 and 7.",
        "The predefined speed data value 110.0 is not valid. "
        "The nearest valid predefined speeddata value v100 is used.",
        "The precision value 3 is not valid. "
        "Valid values are -1 (fine), 0, 1, 5, 10, 15, 20, 30, 40, 50, 60, 80, 100, 150, 200.",
    ]
    assert program.instructions == [INSTRUCTION_INDENT + "MoveJ 1st_target, v100, z3, tool0\\WObj:=wobj0;"]


def test_identifier_warning_once_per_name(irb4600):
    """Test identifier warning per name."""
    program = generate(irb4600, [Movement(make_target("1st", 100.0)), Movement(make_target("1st", 200.0))])
    assert program.warnings == [
        "Target name <1st> starts with a number which is not allowed in RAPID code.",
        "The name 1st is used more than once.",
    ]


def test_collisions_are_logged_at_debug_level(irb4600, caplog):
    """Test debug logging of generation."""
    with caplog.at_level(logging.DEBUG, logger="rapid_kinematics"):
        generate(irb4600, [Movement(make_target("t1", 100.0)), Movement(make_target("t1", 200.0))])
    debug = [record.getMessage() for record in caplog.records
             if record.name == "rapid_kinematics" and record.levelno == logging.DEBUG]
    assert "Names claimed by more than one object: t1" in debug
    assert debug[-1] == "Generated module MainModule: 2 declaration lines, 2 instruction lines, 1 warnings"


def test_long_name_warning(irb4600):
    """Test long name warning."""
    program = generate(irb4600, [AbsoluteJointMovement.create("j" * 40, [0.0] * 6)])
    assert program.warnings == [f"Joint target name <{'j' * 40}> exceeds character limit of 32 characters."]


# Modules
def test_code_lines_and_comments_go_to_their_block(irb4600):
    """Test code lines and comments."""
    program = generate(irb4600, [
        CodeLine("VAR num counter := 0;", CodeType.DECLARATION),
        Comment("two\nlines"),
        CodeLine("counter := counter + 1;"),
    ])
    assert program.declarations == [DECLARATION_INDENT + "VAR num counter := 0;"]
    assert program.instructions == [
        INSTRUCTION_INDENT + "! two",
        INSTRUCTION_INDENT + "! lines",
        INSTRUCTION_INDENT + "counter := counter + 1;",
    ]


def test_program_module(irb4600):
    """Test program module text."""
    program = generate(irb4600, [Movement(make_target())], module_name="Weld", routine_name="run")
    lines = program.program_module.split("\n")
    assert lines[0] == "MODULE Weld"
    assert lines[1].startswith(DECLARATION_INDENT + "CONST robtarget t1")
    assert lines[2] == ""
    assert lines[3] == "    PROC run()"
    assert lines[4] == INSTRUCTION_INDENT + "MoveJ t1, v100, z0, tool0\\WObj:=wobj0;"
    assert lines[-2:] == ["    ENDPROC", "ENDMODULE"]
    assert program.to_text() == program.program_module


def test_base_module(irb4600, gripper):
    """Test base module text."""
    table = WorkObject("table", se3.translation(jnp.array([1000.0, 0.0, 0.0])))
    generator = RAPIDGenerator(irb4600, [OverrideRobotTool(gripper), Movement(make_target(), work_object=table)])
    base = generator.create_base_module()

    assert base.startswith("MODULE BASE (SYSMODULE, NOSTEPIN, VIEW)")
    assert base.endswith("ENDMODULE")
    assert "    PERS tooldata tool0 := " in base
    assert "    PERS tooldata gripper := " in base
    assert "    PERS wobjdata table := [FALSE, TRUE, \"\", [[1000.00, 0.00, 0.00]" in base
    assert base.count("PERS tooldata") == 2


def test_config(irb4600):
    """Test generator config."""
    config = GeneratorConfig(module_name="Main", routine_name="main", instruction_indent="\t\t",
                             base_module_header=False)
    generator = RAPIDGenerator(irb4600, [WaitTime(3.0)], config=config)
    program = generator.generate()
    assert program.instructions == ["\t\tWaitTime 3;"]
    assert program.module_name == "Main"
    assert "! System module" not in generator.create_base_module()


def test_generation_is_repeatable(irb4600):
    """Test repeated generation."""
    generator = RAPIDGenerator(irb4600, [Movement(make_target("t1")), Movement(make_target("t1"))])
    first = generator.generate()
    second = generator.generate()
    assert first == second
    assert generator.create_program_module() == second.program_module


def test_every_action_type_is_checked(irb4600):
    """Test check table covers every action type."""
    generator = RAPIDGenerator(irb4600, [])
    assert set(generator._checks) == set(ActionType)


# Name registry
def test_name_registry():
    """Test name registry."""
    registry = NameRegistry()
    owner, other = object(), object()

    assert registry.claim("a", owner)
    assert not registry.claim("a", owner)
    assert registry.collisions == []
    assert registry.claim("a", other)
    assert registry.collisions == ["a"]
    assert registry.is_claimed_by("a", other)
    assert "a" in registry
    assert len(registry) == 1

    registry.clear()
    assert "a" not in registry
