"""Locate the cluster-management executable.

The locator walks an ordered sequence of candidate resolvers and returns the
first path any of them produces. A resolver is any callable taking the tool
name and returning a path string or ``None``, so new install layouts can be
added by passing a different sequence rather than by editing this module.

Examples
--------
Use the default order (``PATH``, configured extras, known install paths):

    locator = ToolLocator.for_minikube(extra_paths=settings.minikube_paths)
    minikube = locator.locate()

Probe only a custom location:

    locator = ToolLocator("minikube", [FixedPathResolver("/opt/mk/minikube")])

"""

from __future__ import annotations

import dataclasses
import shutil
import typing as typ
from pathlib import Path

from minideploy.config import DEFAULT_MINIKUBE_PATHS
from minideploy.logging import get_logger, log_debug
from minideploy.validation import ToolNotFoundError, normalize_posix_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

MINIKUBE = "minikube"


class CandidateResolver(typ.Protocol):
    """Callable that proposes a path for a tool, or ``None``."""

    def __call__(self, tool: str) -> str | None:
        """Return a candidate path for ``tool`` or ``None``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class SearchPathResolver:
    """Resolve a tool through the process command search path."""

    def __call__(self, tool: str) -> str | None:
        """Return the ``PATH`` match for ``tool``, if any."""
        return shutil.which(tool)


@dataclasses.dataclass(frozen=True, slots=True)
class FixedPathResolver:
    """Resolve a tool to a fixed install location when that file exists."""

    path: str

    def __call__(self, tool: str) -> str | None:
        """Return the configured path if it names an existing file."""
        del tool
        if Path(self.path).is_file():
            return self.path
        return None


def default_resolvers(
    extra_paths: cabc.Iterable[str] = (),
    known_paths: cabc.Iterable[str] = DEFAULT_MINIKUBE_PATHS,
) -> list[CandidateResolver]:
    """Return the default resolver order.

    ``PATH`` first, then each configured extra path, then each known install
    location.
    """
    resolvers: list[CandidateResolver] = [SearchPathResolver()]
    resolvers.extend(FixedPathResolver(path) for path in extra_paths)
    resolvers.extend(FixedPathResolver(path) for path in known_paths)
    return resolvers


class ToolLocator:
    """Find a tool by consulting resolvers in priority order."""

    def __init__(self, tool: str, resolvers: cabc.Sequence[CandidateResolver]) -> None:
        """Store the tool name and the ordered resolvers."""
        self.tool = tool
        self.resolvers = tuple(resolvers)

    @classmethod
    def for_minikube(cls, extra_paths: cabc.Iterable[str] = ()) -> ToolLocator:
        """Build a locator for minikube with the default resolver order."""
        return cls(MINIKUBE, default_resolvers(extra_paths))

    def locate(self) -> str:
        """Return the first candidate path, normalized to POSIX separators.

        Raises
        ------
        ToolNotFoundError
            If no resolver produces a path.

        """
        for resolver in self.resolvers:
            candidate = resolver(self.tool)
            if candidate:
                log_debug(logger, "Resolved %s via %r", self.tool, resolver)
                return normalize_posix_path(candidate)

        msg = (
            f"{self.tool} not found. Install {self.tool} or add it to PATH "
            f"(or list its location in MINIDEPLOY_MINIKUBE_PATHS)."
        )
        raise ToolNotFoundError(msg)
