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

"""Subcommands of the kn-minikube CLI."""

from __future__ import annotations

import typer
from typer.models import OptionInfo


def usage_callback(ctx: typer.Context, value: bool) -> None:
    """Print usage for ``-h`` and exit with status 1."""
    if value and not ctx.resilient_parsing:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


def help_option() -> OptionInfo:
    """``-h/--help`` option that prints usage and exits with status 1."""
    return typer.Option(
        False, "-h", "--help",
        is_eager=True, expose_value=False, callback=usage_callback,
        help="Show this message and exit.",
    )
