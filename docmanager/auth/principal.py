from dataclasses import dataclass, field

from docmanager.models.user import Role, User


@dataclass(frozen=True)
class Principal:
    """The authenticated identity a request runs as.

    Built either from a freshly loaded ``User`` (login, register, refresh) or
    from access token claims, in which case only id, username and roles are
    known.
    """

    id: int
    username: str
    roles: frozenset[Role] = field(default_factory=frozenset)
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            username=user.username,
            roles=frozenset(user.roles),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )

    @classmethod
    def from_claims(cls, claims: dict) -> "Principal":
        """Raises ValueError/KeyError/TypeError on malformed claims."""
        return cls(
            id=int(claims["sub"]),
            username=str(claims["username"]),
            roles=frozenset(Role(r) for r in claims.get("roles", [])),
        )
