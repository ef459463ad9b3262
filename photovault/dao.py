from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from photovault.models import Photo, PhotoVersion


class PhotoDAO:
    """Data Access Object for Photo."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, photo_id: int) -> Photo | None:
        return self.db.get(Photo, photo_id)

    def list(self, limit: int = 100, offset: int = 0) -> Sequence[Photo]:
        return self.db.query(Photo).order_by(Photo.id).offset(offset).limit(limit).all()

    def create(
        self,
        path_original: str,
        path_base: str | None = None,
        title: str | None = None,
        date_taken: datetime | None = None,
    ) -> Photo:
        photo = Photo(
            path_original=path_original,
            path_base=path_base,
            title=title,
            date_taken=date_taken,
        )
        self.db.add(photo)
        self.db.commit()
        self.db.refresh(photo)
        return photo

    def add_version(self, photo_id: int, size: str, path: str) -> PhotoVersion | None:
        photo = self.get(photo_id)
        if photo is None:
            return None
        version = PhotoVersion(photo_id=photo.id, size=size, path=path)
        self.db.add(version)
        self.db.commit()
        self.db.refresh(version)
        return version

    def delete(self, photo_id: int) -> bool:
        photo = self.get(photo_id)
        if photo is None:
            return False
        self.db.delete(photo)
        self.db.commit()
        return True
