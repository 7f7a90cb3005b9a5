"""Resources created on the appliance, and their wire payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

MOUNT_ROOT = "/mnt"
NO_LOGIN_SHELL = "/usr/sbin/nologin"


class DatasetKind(str, Enum):
    FILESYSTEM = "FILESYSTEM"


class AceEffect(str, Enum):
    ALLOW = "ALLOW"


def dataset_path(pool_id: str, identity: str) -> str:
    return f"{pool_id}/users/{identity}"


def mount_path(path: str) -> str:
    return f"{MOUNT_ROOT}/{path}"


@dataclass(frozen=True)
class DatasetSpec:
    path: str
    quota_bytes: int
    kind: DatasetKind = DatasetKind.FILESYSTEM

    @property
    def mount_path(self) -> str:
        return mount_path(self.path)

    def to_payload(self) -> dict[str, object]:
        return {"name": self.path, "type": self.kind.value, "quota": self.quota_bytes}


@dataclass(frozen=True)
class AccountSpec:
    """OS-level account on the appliance.

    SECURITY: ``secret`` is sent to the appliance and nowhere else. It is kept
    out of ``repr`` and ``describe()``; only ``to_payload()`` carries it.
    """

    username: str
    home_directory: str
    secret: str = field(repr=False)
    display_name: str | None = None
    shell: str = NO_LOGIN_SHELL
    create_private_group: bool = True

    def describe(self) -> dict[str, object]:
        return {
            "username": self.username,
            "full_name": self.display_name or self.username,
            "home": self.home_directory,
            "shell": self.shell,
            "group_create": self.create_private_group,
        }

    def to_payload(self) -> dict[str, object]:
        payload = self.describe()
        payload["password"] = self.secret
        return payload


# Permission and inheritance sets granted to the dataset owner.
OWNER_PERMISSIONS: dict[str, bool] = {
    "BASIC_READ": True,
    "BASIC_WRITE": True,
    "BASIC_EXECUTE": True,
    "DELETE_CHILD": True,
    "DELETE_SELF": True,
}

OWNER_INHERITANCE: dict[str, bool] = {
    "FILE_INHERIT": True,
    "DIRECTORY_INHERIT": True,
    "NO_PROPAGATE_INHERIT": False,
    "INHERIT_ONLY": False,
}


@dataclass(frozen=True)
class AccessEntry:
    grantee: str
    effect: AceEffect = AceEffect.ALLOW
    tag: str = "USER"
    permissions: dict[str, bool] = field(default_factory=lambda: dict(OWNER_PERMISSIONS))
    flags: dict[str, bool] = field(default_factory=lambda: dict(OWNER_INHERITANCE))

    def to_payload(self) -> dict[str, object]:
        return {
            "tag": self.tag,
            "id": self.grantee,
            "type": self.effect.value,
            "perms": dict(self.permissions),
            "flags": dict(self.flags),
        }


@dataclass(frozen=True)
class AclSpec:
    target_path: str
    entries: tuple[AccessEntry, ...]
    enabled: bool = True

    @classmethod
    def for_owner(cls, target_path: str, identity: str) -> AclSpec:
        return cls(target_path=target_path, entries=(AccessEntry(grantee=identity),))

    def to_payload(self) -> dict[str, object]:
        return {
            "path": self.target_path,
            "dacl": self.enabled,
            "aces": [entry.to_payload() for entry in self.entries],
        }
