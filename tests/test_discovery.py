from __future__ import annotations

from conftest import paginated_ec2

from ebs_snapshot.discovery import discover
from ebs_snapshot.models import Volume


def _volume(volume_id: str, *, instance_id: str = "i-123", name: str | None = "data", device: str = "/dev/xvdf") -> dict:
    record = {
        "VolumeId": volume_id,
        "Attachments": [{"InstanceId": instance_id, "Device": device, "State": "attached"}],
    }
    if name is not None:
        record["Tags"] = [{"Key": "Name", "Value": name}, {"Key": "Env", "Value": "prod"}]
    return record


def test_discover_requests_named_volumes_attached_to_instance() -> None:
    ec2 = paginated_ec2(volumes=[])

    discover(ec2, "i-123")

    ec2.get_paginator.assert_called_once_with("describe_volumes")
    ec2.get_paginator("describe_volumes").paginate.assert_called_once_with(
        Filters=[
            {"Name": "attachment.instance-id", "Values": ["i-123"]},
            {"Name": "tag-key", "Values": ["Name"]},
        ]
    )


def test_discover_returns_volume_records_in_provider_order() -> None:
    ec2 = paginated_ec2(volumes=[_volume("vol-b", name="logs", device="/dev/xvdg"), _volume("vol-a")])

    volumes = discover(ec2, "i-123")

    assert volumes == [
        Volume(volume_id="vol-b", name="logs", device="/dev/xvdg", instance_id="i-123"),
        Volume(volume_id="vol-a", name="data", device="/dev/xvdf", instance_id="i-123"),
    ]


def test_discover_excludes_unnamed_and_foreign_volumes() -> None:
    ec2 = paginated_ec2(
        volumes=[
            _volume("vol-unnamed", name=None),
            _volume("vol-foreign", instance_id="i-999"),
            _volume("vol-ok"),
        ]
    )

    volumes = discover(ec2, "i-123")

    assert [v.volume_id for v in volumes] == ["vol-ok"]


def test_discover_accepts_empty_name_value() -> None:
    ec2 = paginated_ec2(volumes=[_volume("vol-blank", name="")])

    volumes = discover(ec2, "i-123")

    assert [v.volume_id for v in volumes] == ["vol-blank"]
    assert volumes[0].name == ""


def test_discover_with_no_volumes_returns_empty_list() -> None:
    assert discover(paginated_ec2(volumes=[]), "i-123") == []
