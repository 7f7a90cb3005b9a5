from __future__ import annotations

from storage_provisioner.domain.models import (
    AccessEntry,
    AccountSpec,
    AclSpec,
    DatasetSpec,
    dataset_path,
    mount_path,
)


def test_dataset_payload_and_mount_path() -> None:
    spec = DatasetSpec(path=dataset_path("student-500", "alice"), quota_bytes=42)

    assert spec.to_payload() == {
        "name": "student-500/users/alice",
        "type": "FILESYSTEM",
        "quota": 42,
    }
    assert spec.mount_path == "/mnt/student-500/users/alice"


def test_account_payload_includes_password_but_describe_does_not() -> None:
    spec = AccountSpec(
        username="alice",
        secret="s3cret",
        display_name="alice",
        home_directory=mount_path("tank/users/alice"),
    )

    payload = spec.to_payload()
    assert payload == {
        "username": "alice",
        "password": "s3cret",
        "full_name": "alice",
        "home": "/mnt/tank/users/alice",
        "shell": "/usr/sbin/nologin",
        "group_create": True,
    }
    assert "password" not in spec.describe()
    assert "s3cret" not in repr(spec)


def test_owner_acl_payload() -> None:
    payload = AclSpec.for_owner("/mnt/p/users/alice", "alice").to_payload()

    assert payload == {
        "path": "/mnt/p/users/alice",
        "dacl": True,
        "aces": [
            {
                "tag": "USER",
                "id": "alice",
                "type": "ALLOW",
                "perms": {
                    "BASIC_READ": True,
                    "BASIC_WRITE": True,
                    "BASIC_EXECUTE": True,
                    "DELETE_CHILD": True,
                    "DELETE_SELF": True,
                },
                "flags": {
                    "FILE_INHERIT": True,
                    "DIRECTORY_INHERIT": True,
                    "NO_PROPAGATE_INHERIT": False,
                    "INHERIT_ONLY": False,
                },
            }
        ],
    }


def test_access_entries_do_not_share_permission_dicts() -> None:
    first = AccessEntry(grantee="a")
    second = AccessEntry(grantee="b")
    first.permissions["BASIC_WRITE"] = False
    assert second.permissions["BASIC_WRITE"] is True
