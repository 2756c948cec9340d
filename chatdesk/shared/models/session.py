"""Session identity — who is using the view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _text(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class Session:
    """Identity of the current user. Immutable once loaded."""

    person_id: str = ""
    first_name: str = ""
    paternal_surname: str = ""
    maternal_surname: str = ""
    username: str = ""

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.paternal_surname, self.maternal_surname]
        return " ".join(p for p in parts if p)

    @classmethod
    def from_records(
        cls,
        persona: dict[str, Any],
        user: dict[str, Any],
    ) -> Session:
        """Build a session from the decoded personaData/userData records.

        Missing sub-fields default to ''.
        """
        return cls(
            person_id=_text(persona, "id_persona"),
            first_name=_text(persona, "nombres"),
            paternal_surname=_text(persona, "apellido_paterno"),
            maternal_surname=_text(persona, "apellido_materno"),
            username=_text(user, "username"),
        )

    def to_records(self) -> tuple[dict[str, str], dict[str, str]]:
        persona = {
            "id_persona": self.person_id,
            "nombres": self.first_name,
            "apellido_paterno": self.paternal_surname,
            "apellido_materno": self.maternal_surname,
        }
        return persona, {"username": self.username}
