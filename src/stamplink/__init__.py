"""stamplink - short-lived, tamper-proof validation tokens.

Issues and checks encrypted tokens that bind a purpose, a resource ID and a
security stamp, for email confirmation and password reset links.
"""

__version__ = "0.1.0"

from stamplink.domain.exceptions import InputValidationError
from stamplink.domain.services.security_stamp import new_security_stamp
from stamplink.domain.services.token_provider import (
    DataProtectorTokenProvider,
    TokenProvider,
    get_token_provider,
)
from stamplink.infrastructure.security.data_protection import (
    DataProtector,
    FernetDataProtector,
)

__all__ = [
    "DataProtector",
    "DataProtectorTokenProvider",
    "FernetDataProtector",
    "InputValidationError",
    "TokenProvider",
    "get_token_provider",
    "new_security_stamp",
    "__version__",
]
