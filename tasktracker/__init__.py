# This is patched by github actions during release
__version__ = "0.0.0"

from .version import (
    get_version as get_version,
    is_official_release as is_official_release,
)
