"""Security infrastructure components."""

from stamplink.infrastructure.security.data_protection import (
    DataProtector,
    FernetDataProtector,
)

__all__ = ["DataProtector", "FernetDataProtector"]
