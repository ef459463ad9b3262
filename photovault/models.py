from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photovault.database import Base


class Photo(Base):
    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    date_taken: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    path_original: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    path_base: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
    versions: Mapped[list["PhotoVersion"]] = relationship(
        back_populates="photo", cascade="all, delete-orphan"
    )

    def to_record(self) -> dict[str, Any]:
        """
        Flatten the photo into the record shape used by storage backends:
        every stored file appears under a key starting with "path".
        """
        record: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "dateTaken": self.date_taken.isoformat() if self.date_taken else None,
            "pathOriginal": self.path_original,
            "pathBase": self.path_base,
        }
        for version in self.versions:
            record[f"path{version.size}"] = version.path
        return record


class PhotoVersion(Base):
    """A derived size of a photo, e.g. 100x100 or 800x600xCR."""

    __tablename__ = "photo_versions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    photo_id: Mapped[int] = mapped_column(ForeignKey("photos.id"), index=True)
    size: Mapped[str] = mapped_column(String, nullable=False)
    path: Mapped[str] = mapped_column(String, nullable=False)
    photo: Mapped[Photo] = relationship(back_populates="versions")
