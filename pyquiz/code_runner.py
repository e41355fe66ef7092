"""
Python execution engine for learner code.

Submissions run in a child interpreter with a timeout. The child runs a small
harness that replaces ``input()`` so interactive programs work without a
terminal: supplied inputs are used first, then a fixed list of defaults.
"""

import ast
import json
import logging
import os
import re
import shutil
import subprocess
import sys
import tempfile
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from typing import Optional, Sequence

from pyquiz import config
from pyquiz.models.models import RunResult, SyntaxErrorInfo

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 1000

DEFAULT_INPUTS = ['User', 'Python', 'Hello', 'World', '123', 'Test', 'Code', 'Run', 'Web', 'Browser']

# Matched case-insensitively against the submission before it is run
BLOCKED_PATTERNS = [
    'import os', 'from os', 'import sys', 'import subprocess', 'from subprocess',
    'import shutil', 'import socket', '__import__', 'eval(', 'exec(', 'open(',
    'compile(',
]

NO_OUTPUT_MESSAGE = 'Code executed. (no output)'

HARNESS = r'''
import builtins
import json
import sys
import traceback

_payload = json.loads(sys.stdin.read())
_inputs = list(_payload["inputs"])
_defaults = list(_payload["defaults"])
_calls = [0]


def _input(prompt=""):
    index = _calls[0]
    _calls[0] += 1
    if index < len(_inputs):
        value = _inputs[index]
    else:
        value = _defaults[index % len(_defaults)]
    if prompt:
        sys.stdout.write(str(prompt))
    sys.stdout.write(value + "\n")
    return value


builtins.input = _input
_code = compile(_payload["code"], "<submission>", "exec")
try:
    exec(_code, {"__name__": "__main__", "__builtins__": builtins})
except SystemExit:
    raise
except BaseException:
    _type, _value, _tb = sys.exc_info()
    sys.stdout.flush()
    traceback.print_exception(_type, _value, _tb.tb_next)
    sys.exit(1)
'''


class RuntimeInitError(Exception):
    """Raised when the Python runtime cannot be initialized."""


def check_syntax(code: str) -> Optional[SyntaxErrorInfo]:
    """Return the first syntax error in the code, or None if it compiles."""
    try:
        ast.parse(code, filename='<submission>')
    except SyntaxError as e:
        return SyntaxErrorInfo(line=e.lineno or 0, message=e.msg or str(e))
    except ValueError as e:
        # Source containing null bytes
        return SyntaxErrorInfo(line=0, message=str(e))
    return None


def find_blocked_pattern(code: str) -> Optional[str]:
    code_lower = code.lower()
    for pattern in BLOCKED_PATTERNS:
        if pattern in code_lower:
            return pattern
    return None


def needs_input(code: str) -> dict:
    """Report whether the code reads input and the first prompt it shows."""
    if not re.search(r'\binput\s*\(', code or ''):
        return {'needs_input': False, 'prompt': ''}
    match = re.search(r'\binput\s*\(\s*(["\'])(.*?)\1', code)
    prompt = match.group(2) if match and match.group(2) else 'Enter input:'
    return {'needs_input': True, 'prompt': prompt}


class PythonRuntime:
    """Runs learner code in a child interpreter.

    The interpreter is probed once. Concurrent callers of ensure_ready() all
    wait on the same Future; a failed initialization clears it so the next
    call tries again.
    """

    def __init__(self, executable: Optional[str] = None, timeout: int = 10):
        self.executable = executable
        self.timeout = timeout
        self.version = None
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    @property
    def is_ready(self) -> bool:
        future = self._future
        return future is not None and future.done() and future.exception() is None

    def ensure_ready(self, timeout: Optional[float] = None) -> str:
        """Initialize the runtime once and return the interpreter path."""
        with self._lock:
            future = self._future
            owner = future is None
            if owner:
                future = self._future = Future()

        if owner:
            try:
                future.set_result(self._initialize())
            except Exception as e:
                error = e
                if not isinstance(e, RuntimeInitError):
                    error = RuntimeInitError(f"Python runtime initialization failed: {e}")
                    error.__cause__ = e
                logger.error("Python runtime initialization failed: %s", error)
                with self._lock:
                    self._future = None
                future.set_exception(error)

        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            raise RuntimeInitError(f"Timed out after {timeout}s waiting for the Python runtime") from None

    def reset(self):
        with self._lock:
            self._future = None
        self.version = None

    def _initialize(self) -> str:
        logger.info("Initializing Python runtime...")
        executable = self.executable or sys.executable or shutil.which('python3') or shutil.which('python')
        if not executable:
            raise RuntimeInitError("No Python interpreter found")
        try:
            result = subprocess.run(
                [executable, '--version'],
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise RuntimeInitError(f"Python interpreter {executable} is not usable: {e}") from e
        if result.returncode != 0:
            raise RuntimeInitError(f"Python interpreter {executable} exited with code {result.returncode}")
        self.version = (result.stdout or result.stderr or '').strip()
        logger.info("Python runtime ready: %s (%s)", executable, self.version)
        return executable

    def run(self, code: str, inputs: Sequence[str] = ()) -> RunResult:
        """
        Execute code with simulated input values.

        Args:
            code: Learner source text
            inputs: Values returned by successive input() calls

        Returns:
            RunResult with captured output and an error flag

        Raises:
            ValueError: if an input value is longer than MAX_INPUT_LENGTH
            RuntimeInitError: if the interpreter cannot be initialized
        """
        inputs = [str(value) for value in (inputs or [])]
        for value in inputs:
            if len(value) > MAX_INPUT_LENGTH:
                raise ValueError(f"Input too long (max {MAX_INPUT_LENGTH} characters)")

        blocked = find_blocked_pattern(code)
        if blocked:
            return RunResult(output=f"Security restriction: {blocked} is not allowed", has_error=True)

        syntax_error = check_syntax(code)
        if syntax_error:
            return RunResult(
                output=f"Python execution error:\nSyntaxError: {syntax_error.message} (line {syntax_error.line})",
                has_error=True,
                syntax_error=syntax_error,
            )

        executable = self.ensure_ready()
        payload = json.dumps({'code': code, 'inputs': inputs, 'defaults': DEFAULT_INPUTS})
        logger.debug("Running submission (%d chars, %d inputs)", len(code), len(inputs))

        try:
            result = subprocess.run(
                [executable, '-c', HARNESS],
                input=payload,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=tempfile.gettempdir(),
                env={'PYTHONPATH': '', 'PATH': os.environ.get('PATH', ''), 'PYTHONIOENCODING': 'utf-8'},
            )
        except subprocess.TimeoutExpired:
            logger.info("Submission timed out after %ss", self.timeout)
            return RunResult(
                output=f"Code execution timed out ({self.timeout} seconds). Check for loops that never end.",
                has_error=True,
            )

        output = (result.stdout or '').strip()
        if result.returncode != 0:
            error = (result.stderr or '').strip() or 'Code execution failed'
            message = f"Python execution error:\n{error}"
            if output:
                message = f"{output}\n\n{message}"
            return RunResult(output=message, has_error=True)

        return RunResult(output=output or NO_OUTPUT_MESSAGE, has_error=False)


# Global runtime instance
python_runtime = PythonRuntime(executable=config.PYTHON_EXECUTABLE, timeout=config.EXECUTION_TIMEOUT)
