"""
Entités catalogue en lecture seule: séminaire (course), session datée, jours, lieu.
Relations acycliques: une session référence son séminaire et son lieu par identifiant uniquement.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_START_TIME = "10:00:00"
DEFAULT_END_TIME = "17:00:00"


@dataclass(frozen=True)
class Course:
    id: int
    name: str = ""
    slug: str = ""
    default_price: Optional[float] = None
    vat_applicable: bool = True
    short_description: str = ""
    description: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Course":
        vat = row.get("vat_applicable")
        return cls(
            id=int(row["id"]),
            name=row.get("name") or "",
            slug=row.get("slug") or "",
            default_price=row.get("default_price"),
            # colonne absente/NULL => TVA applicable (valeur par défaut du schéma)
            vat_applicable=True if vat is None else bool(vat),
            short_description=row.get("short_description") or "",
            description=row.get("description") or "",
        )


@dataclass(frozen=True)
class SessionDay:
    date: str
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SessionDay":
        return cls(
            date=str(row.get("date") or ""),
            start_time=row.get("start_time") or DEFAULT_START_TIME,
            end_time=row.get("end_time") or DEFAULT_END_TIME,
        )


@dataclass(frozen=True)
class Location:
    id: int
    site_name: str = ""
    venue: str = ""
    city: str = ""

    @property
    def display_name(self) -> str:
        return self.site_name or self.venue or self.city or ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Location":
        return cls(
            id=int(row["id"]),
            site_name=row.get("site_name") or "",
            venue=row.get("venue") or "",
            city=row.get("city") or "",
        )


@dataclass(frozen=True)
class Session:
    id: int
    course_id: Optional[int]
    price: Optional[float] = None
    capacity: Optional[int] = None
    status: str = "planned"
    title: str = ""
    days: List[SessionDay] = field(default_factory=list)
    location_id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Session":
        course_id = row.get("course_id")
        location_id = row.get("location_id")
        return cls(
            id=int(row["id"]),
            course_id=int(course_id) if course_id is not None else None,
            price=row.get("price"),
            capacity=row.get("capacity"),
            status=row.get("status") or "planned",
            title=row.get("title") or "",
            days=[SessionDay.from_row(d) for d in (row.get("days") or []) if isinstance(d, dict)],
            location_id=int(location_id) if location_id is not None else None,
        )
