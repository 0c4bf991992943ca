from __future__ import annotations

import logging
import re

import requests

from .errors import IdentityError
from .models import Identity

logger = logging.getLogger(__name__)

EC2_META_API = "http://169.254.169.254"
TOKEN_TTL_SECONDS = "60"
REQUEST_TIMEOUT_SECONDS = 2


def resolve(session=None, base_url=EC2_META_API) -> Identity:
    """Return the instance id and region of the host from instance metadata.

    IMDSv2 is tried first; if no token can be obtained the plain IMDSv1 paths
    are read instead. Any failure is fatal for the run.
    """
    session = session or requests.Session()
    headers = {}
    token = _fetch_token(session, base_url)
    if token:
        headers["X-aws-ec2-metadata-token"] = token

    instance_id = _fetch(session, base_url, "instance-id", headers)
    zone = _fetch(session, base_url, "placement/availability-zone", headers)
    region = region_from_zone(zone)
    logger.info("Instance ID is %s in region %s", instance_id, region)
    return Identity(instance_id=instance_id, region=region)


def region_from_zone(zone):
    """Strip the zone letter: ``us-east-1a`` -> ``us-east-1``."""
    zone = zone.strip()
    region = re.sub(r"(\d)[a-z]$", r"\1", zone)
    if not region:
        raise IdentityError(f"cannot derive region from availability zone {zone!r}")
    return region


def _fetch_token(session, base_url):
    try:
        response = session.put(
            f"{base_url}/latest/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": TOKEN_TTL_SECONDS},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.debug("IMDSv2 token request failed, falling back to IMDSv1: %s", e)
        return None
    return response.text.strip() or None


def _fetch(session, base_url, path, headers):
    url = f"{base_url}/latest/meta-data/{path}"
    try:
        response = session.get(url, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise IdentityError(f"instance metadata lookup for {path} failed: {e}") from e

    value = response.text.strip()
    if not value:
        raise IdentityError(f"instance metadata returned an empty {path}")
    return value
