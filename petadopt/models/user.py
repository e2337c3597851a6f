from sqlmodel import Field, SQLModel

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(SQLModel, table=True):
    """Account row owned by the auth service; read here to resolve identity and role."""

    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    first_name: str | None = None
    last_name: str | None = None
    role: str = Field(default=ROLE_USER, max_length=16)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
