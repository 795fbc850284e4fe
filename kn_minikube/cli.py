# /*
# Copyright 2026 The kn-minikube Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""
cli.py - Bring up a local Knative development cluster on minikube.

Subcommands:
    start      Start minikube (reusing a matching cluster) and install Istio + Knative
    delete     Delete the minikube cluster and its cached profile
    status     Show minikube component states and the cached profile

Examples:
    # Default size (16 GB, 8 CPUs, virtualbox)
    kn-minikube start

    # Smaller VM on another driver
    kn-minikube start -m 8192 -c 4 -d hyperkit

    # Throw away the running cluster and start over
    kn-minikube start -f

Environment Variables:
    KN_VM_DRIVER, KN_MEMORY, KN_CPUS, KN_PROFILE_CACHE, KN_KUBERNETES_VERSION,
    KN_POLL_INTERVAL, KN_READY_TIMEOUT, KN_DETECT_POD_FAILURES
"""

from __future__ import annotations

import logging
import sys

import click
import typer
from rich.markup import escape

from kn_minikube import console
from kn_minikube.commands import delete_cmd, help_option, start_cmd, status_cmd
from kn_minikube.errors import BadOptionError, KnMinikubeError, UnknownCommandError

app = typer.Typer(
    help="Bring up a local Knative development cluster on minikube.",
    context_settings={"help_option_names": []},
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def _main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
    _help: bool = help_option(),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    if ctx.invoked_subcommand is None:
        raise UnknownCommandError("command required")


app.command("start")(start_cmd.start)
app.command("delete")(delete_cmd.delete)
app.command("status")(status_cmd.status)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit status.

    Every failure, including usage errors, is reported on stderr and
    yields status 1.
    """
    try:
        return app(args=argv, prog_name="kn-minikube", standalone_mode=False) or 0
    except Exception as e:
        console.print(f"[red]\u274c {escape(str(_classify(e)))}[/red]")
    return 1


def _is_instance_by_name(err: BaseException, *names: str) -> bool:
    # Newer typer raises its own copies of click's exceptions, unrelated to click's classes.
    return any(cls.__name__ in names for cls in type(err).__mro__)


def _classify(err: Exception) -> Exception:
    """Map click usage errors and aborts onto the package's error types."""
    if isinstance(err, click.UsageError) or _is_instance_by_name(err, "UsageError"):
        message = err.format_message()
        if message.startswith("No such command"):
            return UnknownCommandError("unknown command", message)
        return BadOptionError(message)
    if isinstance(err, click.exceptions.Abort) or _is_instance_by_name(err, "Abort"):
        return KnMinikubeError("Aborted")
    return err


if __name__ == "__main__":
    sys.exit(main())
