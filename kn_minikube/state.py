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

"""Persistence of the last started cluster profile."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from kn_minikube import logger
from kn_minikube.errors import PersistenceError


class ProfileStore(Protocol):
    """Key-value store for the resource profile of the running cluster."""

    def load(self) -> str | None: ...

    def save(self, profile: str) -> None: ...

    def clear(self) -> None: ...


class FileProfileStore:
    """ProfileStore backed by a single text file.

    Args:
        path: File holding the profile string.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> str | None:
        """Return the stored profile string, or None if absent or unreadable."""
        try:
            return self.path.read_text().strip() or None
        except (OSError, UnicodeDecodeError) as err:
            logger.debug("No cached profile at %s: %s", self.path, err)
            return None

    def save(self, profile: str) -> None:
        """Write the profile string, creating parent directories.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(profile)
        except OSError as err:
            raise PersistenceError(f"Failed to write cluster profile to {self.path}", str(err)) from err

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as err:
            raise PersistenceError(f"Failed to remove cluster profile {self.path}", str(err)) from err
