"""Data models for the Artifact Hub packages API.

Client-side types for the parts of the registry payload the tools use
(``PackageRecord``, ``RepositoryRecord``, ``SearchPage``).  Parsing is
tolerant of missing keys; unknown keys are kept in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _opt_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0


@dataclass(frozen=True)
class MaintainerRecord:
    name: str
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MaintainerRecord:
        return cls(name=_str(data.get("name")), email=_opt_str(data.get("email")))


@dataclass(frozen=True)
class RepositoryRecord:
    """The chart repository a package was published from."""

    name: str
    url: str = ""
    display_name: Optional[str] = None
    repository_id: str = ""
    kind: int = 0
    verified_publisher: Optional[bool] = None
    official: Optional[bool] = None
    organization_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RepositoryRecord:
        return cls(
            name=_str(data.get("name")),
            url=_str(data.get("url")),
            display_name=_opt_str(data.get("display_name")),
            repository_id=_str(data.get("repository_id")),
            kind=_int(data.get("kind")),
            verified_publisher=_opt_bool(data.get("verified_publisher")),
            official=_opt_bool(data.get("official")),
            organization_name=_opt_str(data.get("organization_name")),
        )


@dataclass(frozen=True)
class AvailableVersion:
    version: str
    created_at: int = 0
    prerelease: bool = False
    deprecated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AvailableVersion:
        return cls(
            version=_str(data.get("version")),
            created_at=_int(data.get("created_at")),
            prerelease=bool(data.get("prerelease", False)),
            deprecated=bool(data.get("deprecated", False)),
        )


@dataclass(frozen=True)
class Link:
    name: str
    url: str


@dataclass(frozen=True)
class PackageRecord:
    """A single Helm chart version as returned by ``/packages/helm/...``.

    Only the fields the tools read are modelled; everything else lands
    in *extra* untouched.
    """

    name: str
    version: str = ""
    description: str = ""
    package_id: str = ""
    normalized_name: str = ""
    app_version: Optional[str] = None
    home_url: Optional[str] = None
    readme: Optional[str] = None
    license: Optional[str] = None
    stars: int = 0
    deprecated: Optional[bool] = None
    signed: Optional[bool] = None
    created_at: int = 0
    relative_path: Optional[str] = None
    repository: Optional[RepositoryRecord] = None
    maintainers: List[MaintainerRecord] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    available_versions: List[AvailableVersion] = field(default_factory=list)
    data: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = frozenset(
        {
            "name",
            "version",
            "description",
            "package_id",
            "normalized_name",
            "app_version",
            "home_url",
            "readme",
            "license",
            "stars",
            "deprecated",
            "signed",
            "created_at",
            "relative_path",
            "repository",
            "maintainers",
            "keywords",
            "links",
            "available_versions",
            "data",
        }
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PackageRecord:
        """Construct from an API JSON payload (tolerant of missing keys)."""
        repo_raw = data.get("repository")
        repository = RepositoryRecord.from_dict(repo_raw) if isinstance(repo_raw, dict) else None

        links = [
            Link(name=_str(item.get("name")), url=_str(item.get("url")))
            for item in data.get("links") or []
            if isinstance(item, dict)
        ]
        pkg_data = data.get("data")

        return cls(
            name=_str(data.get("name")),
            version=_str(data.get("version")),
            description=_str(data.get("description")),
            package_id=_str(data.get("package_id")),
            normalized_name=_str(data.get("normalized_name")),
            app_version=_opt_str(data.get("app_version")),
            home_url=_opt_str(data.get("home_url")),
            readme=_opt_str(data.get("readme")),
            license=_opt_str(data.get("license")),
            stars=_int(data.get("stars")),
            deprecated=_opt_bool(data.get("deprecated")),
            signed=_opt_bool(data.get("signed")),
            created_at=_int(data.get("created_at")),
            relative_path=_opt_str(data.get("relative_path")),
            repository=repository,
            maintainers=[
                MaintainerRecord.from_dict(m)
                for m in data.get("maintainers") or []
                if isinstance(m, dict)
            ],
            keywords=[k for k in data.get("keywords") or [] if isinstance(k, str)],
            links=links,
            available_versions=[
                AvailableVersion.from_dict(v)
                for v in data.get("available_versions") or []
                if isinstance(v, dict)
            ],
            data=pkg_data if isinstance(pkg_data, dict) else None,
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def has_version(self, version: str) -> bool:
        return self.version == version or any(
            v.version == version for v in self.available_versions
        )

    @property
    def source_links(self) -> List[str]:
        return [link.url for link in self.links if "source" in link.name.lower()]


@dataclass(frozen=True)
class SearchPage:
    """Response of ``GET /packages/search``."""

    packages: List[PackageRecord]

    @classmethod
    def from_dict(cls, data: Any) -> SearchPage:
        """Parse from API JSON; any unexpected shape yields an empty page."""
        if not isinstance(data, dict):
            return cls(packages=[])
        raw = data.get("packages")
        # Older API revisions nested results under "data".
        if raw is None and isinstance(data.get("data"), dict):
            raw = data["data"].get("packages")
        if not isinstance(raw, list):
            return cls(packages=[])
        return cls(packages=[PackageRecord.from_dict(p) for p in raw if isinstance(p, dict)])


@dataclass(frozen=True)
class RateLimitInfo:
    """GitHub API quota for the configured token."""

    limit: int
    remaining: int
    reset: int  # unix seconds
