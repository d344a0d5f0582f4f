"""Per-repository manifest set."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping, Optional

from reposync.config.location import RepoLocation
from reposync.errors import InvalidArgumentError
from reposync.models import ManifestRecord


@dataclass(slots=True, frozen=True)
class ManifestSet:
    """
    All manifests of one repository, keyed by package name.

    Iteration yields records ordered by object key, which is also the order
    the aggregate index lists them in.
    """

    location: RepoLocation
    records_by_name: dict[str, ManifestRecord] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        location: RepoLocation,
        records: Iterable[ManifestRecord],
    ) -> ManifestSet:
        """
        Build a set from records.

        Raises:
            InvalidArgumentError: if two records share a package name.
        """
        by_name: dict[str, ManifestRecord] = {}
        for record in records:
            if record.name in by_name:
                raise InvalidArgumentError(
                    f"Duplicate manifest for package '{record.name}'",
                    details={"package": record.name, "location": location.describe()},
                )
            by_name[record.name] = record
        return cls(location=location, records_by_name=by_name)

    # ----------------------------
    # Query helpers
    # ----------------------------
    def has(self, name: str) -> bool:
        return name in self.records_by_name

    def get(self, name: str) -> ManifestRecord:
        return self.records_by_name[name]

    def find(self, name: str) -> Optional[ManifestRecord]:
        return self.records_by_name.get(name)

    def names(self) -> set[str]:
        return set(self.records_by_name)

    def time_substitutions(self) -> list[str]:
        """Names of manifests whose time came from the storage modification time."""
        return sorted(r.name for r in self.records_by_name.values() if r.time_substituted)

    def __contains__(self, name: object) -> bool:
        return name in self.records_by_name

    def __len__(self) -> int:
        return len(self.records_by_name)

    def __iter__(self) -> Iterator[ManifestRecord]:
        return iter(sorted(self.records_by_name.values(), key=lambda r: r.key))

    # ----------------------------
    # Derivation
    # ----------------------------
    def with_changes(
        self,
        written: Mapping[str, ManifestRecord],
        removed: Iterable[str],
    ) -> ManifestSet:
        """Return the set as it looks after writing and removing manifests."""
        by_name = dict(self.records_by_name)
        for name in removed:
            by_name.pop(name, None)
        by_name.update(written)
        return ManifestSet(location=self.location, records_by_name=by_name)
