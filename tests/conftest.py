from __future__ import annotations

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError


def client_error(code: str, operation: str = "DeleteSnapshot") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"simulated {code}"}}, operation)


def paginated_ec2(*, volumes=None, snapshots_by_volume=None) -> Mock:
    """EC2 client mock whose paginators serve fixed describe_volumes/describe_snapshots pages."""
    ec2 = Mock()
    snapshots_by_volume = snapshots_by_volume or {}

    def paginate_volumes(**kwargs):
        return [{"Volumes": list(volumes or [])}]

    def paginate_snapshots(**kwargs):
        volume_id = next(f["Values"][0] for f in kwargs["Filters"] if f["Name"] == "volume-id")
        return [{"Snapshots": list(snapshots_by_volume.get(volume_id, []))}]

    paginators = {
        "describe_volumes": Mock(paginate=Mock(side_effect=paginate_volumes)),
        "describe_snapshots": Mock(paginate=Mock(side_effect=paginate_snapshots)),
    }
    ec2.get_paginator.side_effect = lambda name: paginators[name]
    return ec2


@pytest.fixture
def ec2_factory():
    return paginated_ec2
