"""Domain services for stamplink.

Services contain the token codec, provider and security stamp generation.
"""

from stamplink.domain.services.payload_codec import PayloadCodec
from stamplink.domain.services.security_stamp import (
    SecurityStampGenerator,
    new_security_stamp,
    security_stamp_generator,
)
from stamplink.domain.services.token_provider import (
    DataProtectorTokenProvider,
    TokenProvider,
    get_token_provider,
)

__all__ = [
    "DataProtectorTokenProvider",
    "PayloadCodec",
    "SecurityStampGenerator",
    "TokenProvider",
    "get_token_provider",
    "new_security_stamp",
    "security_stamp_generator",
]
