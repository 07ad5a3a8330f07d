from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class MeasureColumn(_CamelModel):
    request_type: str
    quality_measure: str


class StatusMapping(_CamelModel):
    compliant: str | None = None
    non_compliant: str | None = None


class SystemConfig(_CamelModel):
    name: str
    version: str = "1.0"
    patient_columns: dict[str, str]
    measure_columns: dict[str, MeasureColumn]
    skip_columns: list[str] = Field(default_factory=list)
    status_mapping: dict[str, StatusMapping] = Field(default_factory=dict)
    required_patient_columns: list[str] = Field(
        default_factory=lambda: ["Patient", "DOB"]
    )

    def status_for(self, quality_measure: str) -> StatusMapping | None:
        return self.status_mapping.get(quality_measure)


class SystemEntry(_CamelModel):
    name: str
    config_file: str


class SystemsRegistry(_CamelModel):
    default: str
    systems: dict[str, SystemEntry]


@dataclass(frozen=True, slots=True)
class SystemInfo:
    id: str
    name: str
    is_default: bool
