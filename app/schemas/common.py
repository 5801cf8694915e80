from sqlmodel import SQLModel


def clean_text(v: str | None) -> str | None:
    """
    Trim whitespace and drop angle brackets from free text.

    Empty results collapse to None.
    """
    if v is None:
        return None
    v = v.strip().replace("<", "").replace(">", "")
    return v or None


class Pagination(SQLModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageResponse(SQLModel):
    message: str
