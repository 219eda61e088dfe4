from .builders import build
from .dispatcher import Dispatcher, Reply
from .env import ExecutionEnvironment, resolve
from .errors import BuildError, KeybotError, LogPathNotFound, ParseError, ResolutionError, RunnerError
from .grammar import KEYBOT, CommandSpec, ParameterSpec
from .model import EnvVar, JobDescriptor
from .parser import ParsedCommand, UsageText, parse

__all__ = [
    "build",
    "Dispatcher",
    "Reply",
    "ExecutionEnvironment",
    "resolve",
    "BuildError",
    "KeybotError",
    "LogPathNotFound",
    "ParseError",
    "ResolutionError",
    "RunnerError",
    "KEYBOT",
    "CommandSpec",
    "ParameterSpec",
    "EnvVar",
    "JobDescriptor",
    "ParsedCommand",
    "UsageText",
    "parse",
]
