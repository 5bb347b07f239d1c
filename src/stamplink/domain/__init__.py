"""Domain layer - token payloads, codec, provider and error taxonomy."""
