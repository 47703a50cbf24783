"""Permission Set & Authorization Check.

Invariants:
    - Permissions is immutable once resolved for a request
    - authorize() answers False for Anonymous and for a missing code alike;
      turning that into 401 vs 403 is the HTTP layer's job
"""

from dataclasses import dataclass

from dotareplays.core.domain_types import Anonymous, PermissionCode, Subject


@dataclass(frozen=True)
class Permissions:
    codes: tuple[str, ...] = ()

    @classmethod
    def of(cls, *codes: str) -> "Permissions":
        return cls(tuple(c.value if isinstance(c, PermissionCode) else c for c in codes))

    def include(self, code: str | PermissionCode) -> bool:
        wanted = code.value if isinstance(code, PermissionCode) else code
        return any(c == wanted for c in self.codes)

    def __len__(self) -> int:
        return len(self.codes)


def authorize(subject: Subject, permissions: Permissions, code: str | PermissionCode) -> bool:
    if isinstance(subject, Anonymous):
        return False
    return permissions.include(code)
