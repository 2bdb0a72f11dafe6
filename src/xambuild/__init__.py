"""xambuild - build, package and publish Xamarin apps by wrapping their command-line tools."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("xambuild")
except PackageNotFoundError:
    __version__ = "0.0.0"

from xambuild.config import ConfigError, XamBuildConfig, load_config
from xambuild.context import BuildContext
from xambuild.core.arguments import ArgumentBuilder, ArgumentSequence
from xambuild.core.artifacts import find_artifact, find_files
from xambuild.core.retry import RetryOutcome, RetryState, attempt, with_retry
from xambuild.core.tool_result import InvocationResult
from xambuild.errors import (
    BatchOperationError,
    ConfigurationError,
    RetryExhaustedError,
    ToolExecutionError,
    ToolNotFoundError,
    XamBuildError,
)
