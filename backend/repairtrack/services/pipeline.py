# Overview: Ordered stage configuration for the order workflow.

"""
Order Pipeline

Two stage sequences coexist across deployments:

    hub:          submitted -> shipped -> received -> completed -> reshipped -> in_store
    single_site:  submitted -> received -> completed -> departure -> in_store

The lifecycle manager receives a Pipeline instance and never hard-codes
stage names, so either variant (or a custom list from configuration) works
unchanged.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Any

from ..errors import ValidationError


HUB_STAGES = ("submitted", "shipped", "received", "completed", "reshipped", "in_store")
SINGLE_SITE_STAGES = ("submitted", "received", "completed", "departure", "in_store")

VARIANTS = {
    "hub": HUB_STAGES,
    "single_site": SINGLE_SITE_STAGES,
}

DIRECTION_NEXT = "next"
DIRECTION_PREV = "prev"
VALID_DIRECTIONS = (DIRECTION_NEXT, DIRECTION_PREV)


class Pipeline:
    """Strictly ordered, duplicate-free sequence of stage tokens."""

    def __init__(self, stages: Iterable[str], *, ready_stage: str | None = None):
        stages = tuple(s.strip() for s in stages if s and s.strip())
        if len(stages) < 2:
            raise ValidationError("A pipeline needs at least two stages")
        if len(set(stages)) != len(stages):
            raise ValidationError(f"Pipeline stages must be unique: {', '.join(stages)}")

        self.stages = stages
        self._index = {stage: i for i, stage in enumerate(stages)}

        ready = ready_stage or stages[-1]
        if ready not in self._index:
            raise ValidationError(f"Ready stage '{ready}' is not part of the pipeline")
        self.ready_stage = ready

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Pipeline":
        """
        Build from ORDER_PIPELINE / READY_STAGE.

        ORDER_PIPELINE is a variant name ("hub", "single_site") or a
        comma-separated list of stage tokens.
        """
        setting = (config.get("ORDER_PIPELINE") or "hub").strip()
        stages = VARIANTS.get(setting)
        if stages is None:
            if "," not in setting:
                raise ValidationError(
                    f"Unknown pipeline variant '{setting}'. Use one of {', '.join(VARIANTS)} or a comma list"
                )
            stages = setting.split(",")
        return cls(stages, ready_stage=config.get("READY_STAGE"))

    @property
    def first(self) -> str:
        return self.stages[0]

    @property
    def last(self) -> str:
        return self.stages[-1]

    def __contains__(self, stage: object) -> bool:
        return stage in self._index

    def __iter__(self):
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"<Pipeline {' -> '.join(self.stages)}>"

    def validate(self, stage: str) -> str:
        if stage not in self._index:
            raise ValidationError(
                f"Invalid status '{stage}'. Must be one of: {', '.join(self.stages)}"
            )
        return stage

    def index(self, stage: str) -> int:
        return self._index[self.validate(stage)]

    def neighbour(self, stage: str, direction: str) -> str | None:
        """Adjacent stage in the given direction, or None at an edge."""
        if direction not in VALID_DIRECTIONS:
            raise ValidationError(f"Invalid direction '{direction}'. Must be 'next' or 'prev'")
        i = self.index(stage) + (1 if direction == DIRECTION_NEXT else -1)
        if i < 0 or i >= len(self.stages):
            return None
        return self.stages[i]

    def is_final(self, stage: str) -> bool:
        return stage == self.last
