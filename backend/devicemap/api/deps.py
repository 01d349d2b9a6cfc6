from fastapi import HTTPException


def parse_id(raw: str, label: str) -> int:
    """Strict integer path id; anything else is a 400, not FastAPI's 422."""
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
