"""RAPID code generation."""

from .generator import GeneratorConfig, RAPIDGenerator, RAPIDProgram
from .names import NameRegistry

__all__ = ["GeneratorConfig", "NameRegistry", "RAPIDGenerator", "RAPIDProgram"]
