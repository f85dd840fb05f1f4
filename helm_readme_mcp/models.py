"""Pydantic models for tool responses.

These are the JSON shapes handed back to MCP clients.  Optional fields
left as ``None`` are dropped on serialisation (see :func:`dump`).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UsageExample(BaseModel):
    """A titled, language-tagged snippet taken from chart documentation."""

    title: str
    description: Optional[str] = None
    code: str
    language: str = Field(description="Normalised language tag, e.g. 'bash' or 'yaml'")


class InstallationInfo(BaseModel):
    command: str
    alternatives: Optional[List[str]] = None


class AuthorInfo(BaseModel):
    name: str
    email: Optional[str] = None
    url: Optional[str] = None


class RepositoryInfo(BaseModel):
    type: str = "git"
    url: str
    directory: Optional[str] = None


class PackageBasicInfo(BaseModel):
    name: str
    version: str
    description: str = ""
    app_version: Optional[str] = None
    homepage: Optional[str] = None
    sources: Optional[List[str]] = None
    license: Optional[str] = None
    maintainers: List[AuthorInfo] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    annotations: Optional[Dict[str, Any]] = None


class DownloadStats(BaseModel):
    """Download counters.

    Artifact Hub publishes no download telemetry; the numbers are derived
    from the star count and ``estimated`` is always set for them.
    """

    last_day: int = 0
    last_week: int = 0
    last_month: int = 0
    estimated: bool = True

    @classmethod
    def from_stars(cls, stars: Optional[int]) -> "DownloadStats":
        count = stars or 0
        return cls(last_day=count, last_week=count * 7, last_month=count * 30)


class PackageReadmeResponse(BaseModel):
    package_name: str
    version: str
    description: str = ""
    readme_content: str = ""
    usage_examples: List[UsageExample] = Field(default_factory=list)
    installation: InstallationInfo
    basic_info: PackageBasicInfo
    repository: Optional[RepositoryInfo] = None
    exists: bool = True


class PackageInfoResponse(BaseModel):
    package_name: str
    latest_version: str = ""
    description: str = ""
    author: str = ""
    maintainers: List[AuthorInfo] = Field(default_factory=list)
    license: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    dependencies: Optional[Dict[str, str]] = None
    dev_dependencies: Optional[Dict[str, str]] = None
    download_stats: DownloadStats = Field(default_factory=lambda: DownloadStats(estimated=False))
    repository: Optional[RepositoryInfo] = None
    app_version: Optional[str] = None
    deprecated: Optional[bool] = None
    signed: Optional[bool] = None
    exists: bool = True


class SearchRepository(BaseModel):
    name: str
    display_name: str
    url: str


class PackageSearchResult(BaseModel):
    name: str
    version: str
    description: str = ""
    keywords: List[str] = Field(default_factory=list)
    repository: SearchRepository
    maintainers: List[AuthorInfo] = Field(default_factory=list)
    app_version: Optional[str] = None
    created_at: str
    deprecated: Optional[bool] = None
    signed: Optional[bool] = None
    stars: Optional[int] = None


class SearchPackagesResponse(BaseModel):
    query: str
    total: int
    packages: List[PackageSearchResult] = Field(default_factory=list)


def dump(model: BaseModel) -> Dict[str, Any]:
    """Serialise a response model for the wire, omitting unset optionals."""
    return model.model_dump(mode="json", exclude_none=True)
