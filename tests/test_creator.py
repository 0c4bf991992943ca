from __future__ import annotations

from datetime import date
from unittest.mock import Mock

import pytest
from conftest import client_error

from ebs_snapshot.creator import create_backup, snapshot_description
from ebs_snapshot.models import Volume


def _volume(name: str | None = "data", device: str | None = "/dev/xvdf") -> Volume:
    return Volume(volume_id="vol-1", name=name, device=device, instance_id="i-123")


def test_snapshot_description_uses_name_device_and_date() -> None:
    assert snapshot_description(_volume(), date(2024, 1, 10)) == "data (/dev/xvdf) backup 2024-01-10"


def test_snapshot_description_substitutes_empty_strings_for_missing_fields() -> None:
    assert snapshot_description(_volume(name=None, device=None), date(2024, 1, 10)) == " () backup 2024-01-10"


def test_create_backup_creates_then_tags_snapshot() -> None:
    ec2 = Mock()
    ec2.create_snapshot.return_value = {"SnapshotId": "snap-new"}

    snapshot_id = create_backup(ec2, _volume(), date(2024, 1, 10))

    assert snapshot_id == "snap-new"
    ec2.create_snapshot.assert_called_once_with(VolumeId="vol-1", Description="data (/dev/xvdf) backup 2024-01-10")
    ec2.create_tags.assert_called_once_with(
        Resources=["snap-new"],
        Tags=[
            {"Key": "CreatedBy", "Value": "AutomatedBackup"},
            {"Key": "Name", "Value": "data"},
        ],
    )
    assert [c[0] for c in ec2.method_calls] == ["create_snapshot", "create_tags"]


def test_create_backup_does_not_tag_when_creation_fails() -> None:
    ec2 = Mock()
    ec2.create_snapshot.side_effect = client_error("IncorrectState", "CreateSnapshot")

    with pytest.raises(Exception, match="IncorrectState"):
        create_backup(ec2, _volume(), date(2024, 1, 10))

    ec2.create_tags.assert_not_called()
