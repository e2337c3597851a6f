from sqlmodel import Field, SQLModel


class Pet(SQLModel, table=True):
    """Catalog row owned by the pet service; scheduling only reads it."""

    __tablename__ = "pets"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    type: str | None = None
    breed: str | None = None
    image_url: str | None = None
