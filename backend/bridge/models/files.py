from typing import Any

from pydantic import BaseModel, Field, field_validator

UNKNOWN_FILENAME = "Unknown"


class FileRecord(BaseModel):
    doc_id: str
    doc_metadata: dict[str, Any] | None = None

    @property
    def file_name(self) -> str | None:
        """Filename from metadata, or None when absent or not a string."""
        if not self.doc_metadata:
            return None
        name = self.doc_metadata.get("file_name")
        return name if isinstance(name, str) else None

    @property
    def display_name(self) -> str:
        return self.file_name if self.file_name is not None else UNKNOWN_FILENAME


class IngestedFileList(BaseModel):
    object: str = "list"
    model: str = "private-gpt"
    data: list[FileRecord] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value: Any) -> Any:
        return [] if value is None else value


class BulkDeleteResult(BaseModel):
    success: bool = True
    message: str
    deleted_count: int = 0
    failed_count: int = 0
    total_files: int = 0
    failed_files: list[str] = Field(default_factory=list)


class ProcessingState(BaseModel):
    completed: bool
    message: str


class ProcessingStatus(BaseModel):
    filename: str
    exists: bool
    processing: bool
    status: ProcessingState
