"""
Data models for the schema review pipeline

Wire types are pydantic models with camelCase aliases so they round-trip the
review service JSON. Report types are plain dataclasses built locally.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the review service"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ModifiedFile(WireModel):
    """One changed source file"""
    file_path: str = Field(..., min_length=1)
    diff: str = ""
    base_content: Optional[str] = None
    head_content: Optional[str] = None


class CodeChangeInfo(WireModel):
    """A batch of changed files, e.g. a pull request, keyed by file path"""
    modified_files: Dict[str, ModifiedFile] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _keys_match_paths(self) -> "CodeChangeInfo":
        for path, modified_file in self.modified_files.items():
            if path != modified_file.file_path:
                raise ValueError(f"key {path!r} does not match file path {modified_file.file_path!r}")
        return self

    def add(self, modified_file: ModifiedFile) -> None:
        if modified_file.file_path in self.modified_files:
            raise ValueError(f"Duplicate modified file: {modified_file.file_path}")
        self.modified_files[modified_file.file_path] = modified_file

    @property
    def file_paths(self) -> List[str]:
        return list(self.modified_files)


class FullTableName(WireModel):
    """database.schema.table identity, compared case-insensitively"""
    database_name: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1)
    table_name: str = Field(..., min_length=1)

    def _key(self):
        return (self.database_name.upper(), self.schema_name.upper(), self.table_name.upper())

    def __eq__(self, other):
        if not isinstance(other, FullTableName):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    @property
    def qualified_name(self) -> str:
        return ".".join(self._key())

    @property
    def short_name(self) -> str:
        return self.table_name.upper()


class DbtModel(WireModel):
    """Binds a model file to the table it builds"""
    file_path: str = Field(..., min_length=1)
    full_table_name: FullTableName


class DbtModelInfo(WireModel):
    models: Dict[str, DbtModel] = Field(default_factory=dict)

    def to_context(self) -> str:
        """Serialize as the additional context string sent with a review"""
        return json.dumps(self.to_wire(), indent=2)


class SchemaChange(WireModel):
    """A structural change detected by the review service"""
    filename: str
    full_table_name: FullTableName
    change_description: str


class TableTelemetry(WireModel):
    """Operational snapshot of one table"""
    artifact_id: int
    artifact: FullTableName
    inserted_row_count: int
    total_row_count: int
    most_recent_update_timestamp: float
    load_duration_seconds: float
    total_bytes_processed: int
    downstream_object_count: int


class SchemaReviewRequest(WireModel):
    data_source_id: int
    code_change_info: CodeChangeInfo
    additional_context: str = ""


class SchemaReviewResponse(WireModel):
    schema_changes: List[SchemaChange] = Field(default_factory=list)


class TableDetailsResponse(WireModel):
    table_details: TableTelemetry


@dataclass
class ReportItem:
    """One finding enriched with table telemetry"""
    filename: str
    full_table_name: FullTableName
    change_description: str
    table_telemetry: TableTelemetry
    dashboard_link: str


@dataclass
class SchemaChangeReport:
    """Ordered report items, in the order the service returned the changes"""
    report_items: List[ReportItem] = field(default_factory=list)

    def append(self, item: ReportItem) -> None:
        self.report_items.append(item)

    @property
    def is_empty(self) -> bool:
        return not self.report_items

    def __len__(self) -> int:
        return len(self.report_items)

    def __iter__(self) -> Iterator[ReportItem]:
        return iter(self.report_items)
