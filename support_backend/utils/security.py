"""Security helpers: secret masking for safe logging (minimal)."""

def mask_secret(value: str, visible: int = 4) -> str:
    if not value:
        return "(unset)"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"
