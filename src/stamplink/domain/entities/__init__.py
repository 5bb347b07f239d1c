"""Domain entities for stamplink."""

from stamplink.domain.entities.token_payload import TokenPayload

__all__ = ["TokenPayload"]
