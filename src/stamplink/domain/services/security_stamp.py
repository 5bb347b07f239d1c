"""Security stamp generation.

A security stamp is the server-held secret bound into every validation token.
Rotating a resource's stamp invalidates all of its outstanding tokens. Storing
stamps against resources is up to the caller.
"""

import base64
import secrets

SECURITY_STAMP_BYTES = 20


class SecurityStampGenerator:
    """Service for generating security stamps from the OS CSPRNG.

    ``secrets`` draws from the operating system's random source, which is
    safe to call from any number of threads at once.
    """

    @staticmethod
    def new_security_stamp() -> str:
        """Generate a new base32 encoded 160-bit security stamp.

        Returns:
            32-character RFC 4648 base32 string (no padding needed for 20 bytes).
        """
        return base64.b32encode(secrets.token_bytes(SECURITY_STAMP_BYTES)).decode("ascii")


# Default security stamp generator instance
security_stamp_generator = SecurityStampGenerator()


def new_security_stamp() -> str:
    """Generate a new security stamp with the default generator."""
    return security_stamp_generator.new_security_stamp()
