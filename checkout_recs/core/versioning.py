from fastapi import Header
from typing import Literal

ApiVersion = Literal["v1"]
SUPPORTED_VERSIONS = {"1": "v1", "v1": "v1"}
DEFAULT_VERSION: ApiVersion = "v1"

async def resolve_version(
    x_api_version: str | None = Header(default=None),
) -> ApiVersion:
    """
    Resolve the panel API version from the 'X-API-Version' header ('1' or 'v1').
    Missing or unknown values fall back to DEFAULT_VERSION; the view echoes what was used.
    """
    if x_api_version is None:
        return DEFAULT_VERSION
    return SUPPORTED_VERSIONS.get(x_api_version.strip().lower(), DEFAULT_VERSION)
