"""Wire models for the automatic mount-and-map flow.

The helper answers with one of two models, told apart by ``status``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from lindy.models.folder import FolderCandidate


class WindowsPartitionRef(BaseModel):
    """The Windows partition the flow settled on."""

    model_config = ConfigDict(extra="ignore")

    uuid: str | None = None
    label: str | None = None


class CandidateModel(BaseModel):
    """Wire form of a FolderCandidate."""

    model_config = ConfigDict(extra="ignore")

    folder_type: str = ""
    linux_path: str
    windows_path: str

    def to_candidate(self) -> FolderCandidate:
        return FolderCandidate(
            folder_type=self.folder_type,
            linux_path=self.linux_path,
            windows_path=self.windows_path,
        )


class AutoMapSuccess(BaseModel):
    """Successful automatic flow."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["ok"]
    mount_point: str
    windows_partition: WindowsPartitionRef = Field(default_factory=WindowsPartitionRef)
    username: str = ""
    mappings: list[CandidateModel] = Field(default_factory=list)
    message: str = ""


class AutoMapError(BaseModel):
    """Failed automatic flow."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["error"]
    code: str = ""
    message: str = ""
    stderr: str = ""
    stdout: str = ""
    username: str | None = None
    mount_point: str | None = None
