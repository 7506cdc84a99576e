"""Result values passed between deployment stages."""

from __future__ import annotations

import dataclasses
import enum


class Stage(enum.StrEnum):
    """The four stages of a deployment, in execution order."""

    LOCATE_TOOLS = "locate-tools"
    ACQUIRE_SOURCE = "acquire-source"
    PUBLISH_IMAGE = "publish-image"
    RECONCILE_CLUSTER = "reconcile-cluster"


@dataclasses.dataclass(frozen=True, slots=True)
class StageResult:
    """Outcome of a single stage.

    Attributes:
        stage: Which stage produced this result.
        ok: Whether the stage succeeded.
        value: The stage's product on success (tool path, checkout
            directory, image reference or URL).
        reason: Human-readable failure description.

    """

    stage: Stage
    ok: bool
    value: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, stage: Stage, value: str) -> StageResult:
        """Build a successful result carrying ``value``."""
        return cls(stage=stage, ok=True, value=value)

    @classmethod
    def failure(cls, stage: Stage, reason: str) -> StageResult:
        """Build a failed result explaining ``reason``."""
        return cls(stage=stage, ok=False, reason=reason)


@dataclasses.dataclass(slots=True)
class DeployOutcome:
    """Accumulated stage results for one run."""

    results: list[StageResult] = dataclasses.field(default_factory=list)

    def record(self, result: StageResult) -> StageResult:
        """Append ``result`` and return it."""
        self.results.append(result)
        return result

    @property
    def ok(self) -> bool:
        """True when every stage ran and succeeded."""
        return len(self.results) == len(Stage) and all(r.ok for r in self.results)

    @property
    def failed(self) -> StageResult | None:
        """The first failed stage result, if any."""
        return next((r for r in self.results if not r.ok), None)

    @property
    def url(self) -> str | None:
        """The service URL when the run completed."""
        if not self.ok:
            return None
        return self.results[-1].value

    def value_of(self, stage: Stage) -> str | None:
        """Return the value produced by ``stage``, if it succeeded."""
        for result in self.results:
            if result.stage is stage and result.ok:
                return result.value
        return None
