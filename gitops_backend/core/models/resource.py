"""
Resource models — observed cluster objects and the per-service views
built from them.

A ``ResourceDescriptor`` is what the resource parser hands to the
correlation engine. The engine reads only two labels and the image
list; everything else is carried through untouched.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr

NAME_LABEL = "app.kubernetes.io/name"
PART_OF_LABEL = "app.kubernetes.io/part-of"


class ResourceDescriptor(BaseModel):
    """Summary of one deployed object: API type, name, labels, images."""

    model_config = ConfigDict(frozen=True)

    group: StrictStr = ""
    version: StrictStr = ""
    kind: StrictStr = ""
    name: StrictStr = ""
    labels: dict[StrictStr, StrictStr] = Field(default_factory=dict)
    images: list[StrictStr] = Field(default_factory=list)

    def label(self, key: str) -> str:
        """Label value, or ``""`` when the key is absent."""
        return self.labels.get(key, "")

    @property
    def app_name(self) -> str:
        return self.label(NAME_LABEL)

    @property
    def part_of(self) -> str:
        return self.label(PART_OF_LABEL)


class SourceReference(BaseModel):
    """Where a service's code lives. The zero value means unknown."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    type: str = ""

    @property
    def known(self) -> bool:
        return bool(self.url)


class AggregatedServiceView(BaseModel):
    """Everything observed in the cluster for one declared service."""

    name: str
    source: SourceReference = Field(default_factory=SourceReference)
    images: list[str] = Field(default_factory=list)
    resources: list[ResourceDescriptor] = Field(default_factory=list)
