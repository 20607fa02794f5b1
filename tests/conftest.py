"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
from unittest.mock import MagicMock

import pytest
from lindy.helpers.base import PrivilegedHelper
from lindy.models.result import OperationResult, OperationStatus

WINDOWS_UUID = "53337bda-2dc1-4a14-a8d9-c1702ddd33d6"


@pytest.fixture
def windows_uuid() -> str:
    """A valid canonical partition UUID."""
    return WINDOWS_UUID


@pytest.fixture
def mock_lsblk_output() -> str:
    """Sample lsblk -J output with a nested disk layout."""
    return json.dumps(
        {
            "blockdevices": [
                {
                    "name": "nvme0n1",
                    "fstype": None,
                    "uuid": None,
                    "label": None,
                    "mountpoint": None,
                    "size": "476.9G",
                    "children": [
                        {
                            "name": "nvme0n1p1",
                            "fstype": "vfat",
                            "uuid": "A1B2-C3D4",
                            "label": "SYSTEM",
                            "mountpoint": "/boot/efi",
                            "size": "260M",
                        },
                        {
                            "name": "nvme0n1p3",
                            "fstype": "ntfs",
                            "uuid": "01D9A1B2C3D4E5F6",
                            "label": "Windows",
                            "mountpoint": None,
                            "size": "300G",
                        },
                        {
                            "name": "nvme0n1p5",
                            "fstype": "ext4",
                            "uuid": WINDOWS_UUID.upper(),
                            "label": None,
                            "mountpoint": "/",
                            "size": "176G",
                        },
                    ],
                }
            ]
        }
    )


@pytest.fixture
def mock_fstab_text() -> str:
    """Mount table with a lindy block, a hand-written bind and plain entries."""
    return (
        "# /etc/fstab: static file system information.\n"
        f"UUID={WINDOWS_UUID} / ext4 errors=remount-ro 0 1\n"
        "UUID=A1B2-C3D4 /boot/efi vfat umask=0077 0 1\n"
        "# lindy BEGIN: k3x9q2ab\n"
        "UUID=01D9A1B2C3D4E5F6 /mnt/windows auto "
        "defaults,noatime,nofail,x-systemd.automount,x-systemd.device-timeout=10 0 2\n"
        "/mnt/windows/Users/bob/Documents /home/bob/Documents none bind 0 0\n"
        "/mnt/windows/Users/bob/Pictures /home/bob/Pictures none bind 0 0\n"
        "# lindy END: k3x9q2ab\n"
        "/srv/music /home/bob/Music none bind 0 0\n"
    )


@pytest.fixture
def ok_result() -> OperationResult:
    """A plain success answer from the helper."""
    return OperationResult(status=OperationStatus.OK)


@pytest.fixture
def mock_helper() -> MagicMock:
    """Privileged helper double; every call must be stubbed by the test."""
    helper = MagicMock(spec=PrivilegedHelper)
    helper.list_partitions.return_value = []
    helper.list_blocks.return_value = []
    return helper
