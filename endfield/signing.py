import hashlib
import hmac
import json
from typing import Optional

from endfield.constants import PLATFORM, VNAME


def sign_header_json(timestamp: str, platform: str = PLATFORM, vname: str = VNAME) -> str:
    """Auxiliary header object hashed into every signature.

    Key order and the compact separators are checked server side.
    """
    header_obj = {
        "platform": platform,
        "timestamp": timestamp,
        "dId": "",
        "vName": vname,
    }
    return json.dumps(header_obj, separators=(",", ":"))


def compute_sign(
    path: str,
    timestamp: str,
    secret: Optional[str],
    platform: str = PLATFORM,
    vname: str = VNAME,
    body: str = "",
) -> Optional[str]:
    """
    Compute the v2 request signature: MD5(HMAC-SHA256(path + body + timestamp + headers))

    Args:
        path: API endpoint path, without host or query
        timestamp: Unix timestamp in seconds, as sent in the ``timestamp`` header
        secret: Session secret (the ``token`` returned with the cred)
        platform: Platform id sent in the ``platform`` header
        vname: Client version sent in the ``vname`` header
        body: Request body (empty for every endpoint used here)

    Returns:
        Lowercase MD5 hex string, or None when no secret is available
    """
    if not secret:
        return None

    sign_string = f"{path}{body}{timestamp}{sign_header_json(timestamp, platform, vname)}"

    hmac_hash = hmac.new(
        secret.encode(),
        sign_string.encode(),
        hashlib.sha256
    ).hexdigest()

    return hashlib.md5(hmac_hash.encode()).hexdigest()
