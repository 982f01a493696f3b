import asyncio
import json
import logging
import shlex
import subprocess

logger = logging.getLogger("openshift-allocations-mcp")

OC_BINARY = "oc"


class OCError(Exception):
    """Raised when an oc command fails or returns unusable output."""
    pass


async def run_oc_command(args: list[str]) -> str:
    """
    Execute an oc command and return stdout as string.

    Args:
        args: List of arguments to pass to oc (e.g., ["get", "nodes"])

    Returns:
        Standard output string

    Raises:
        OCError: If oc is missing or the command returns a non-zero exit code
    """
    cmd = [OC_BINARY] + args
    cmd_str = shlex.join(cmd)
    logger.debug(f"Executing: {cmd_str}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE
        )
    except FileNotFoundError:
        raise OCError(f"The '{OC_BINARY}' CLI tool is not found in PATH.")

    stdout, stderr = await proc.communicate()
    stderr_str = stderr.decode("utf-8", errors="replace")

    if proc.returncode != 0:
        logger.error(f"Command failed: {cmd_str}\nStderr: {stderr_str}")
        raise OCError(f"Command failed with exit code {proc.returncode}: {stderr_str.strip()}")

    return stdout.decode("utf-8")


async def run_oc_json(args: list[str]) -> dict:
    """
    Execute an oc get command and parse the output as JSON.
    Adds '-o json' unless an output format is already given.

    Args:
        args: List of arguments

    Returns:
        Parsed JSON object
    """
    if "-o" not in args and "--output" not in args:
        args = args + ["-o", "json"]

    stdout = await run_oc_command(args)

    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        raise OCError(f"Failed to parse JSON output from oc: {e}")
