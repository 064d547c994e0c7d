from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import get_current_user
from vetclinic.database import get_db
from vetclinic.models.animal import Animal
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable
from vetclinic.scheduling.enums import AnimalGender

router = APIRouter(tags=['animals'])

NULLABLE_ANIMAL_FIELDS = {'weight', 'notes'}


class CreateAnimalRequest(BaseModel):
    name: str
    breed: str
    age: int = Field(ge=0)
    weight: float | None = Field(default=None, ge=0)
    gender: AnimalGender
    notes: str | None = None

    @field_validator('name', 'breed')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('This field is required.')
        return normalized


class UpdateAnimalRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    breed: str | None = Field(default=None, min_length=1)
    age: int | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)
    gender: AnimalGender | None = None
    notes: str | None = None


class AnimalResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    breed: str
    age: int
    weight: float | None = None
    gender: AnimalGender
    notes: str | None = None

    class Config:
        from_attributes = True


def _get_owned_animal(animal_id: int, current_user: User, db: Session) -> Animal:
    animal = db.get(Animal, animal_id)
    if animal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Animal not found.')
    if animal.owner_id != current_user.id and not current_user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not authorized to access this animal.')
    return animal


@router.get('', response_model=list[AnimalResponse])
def list_animals(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        query = db.query(Animal)
        if not current_user.is_staff:
            query = query.filter(Animal.owner_id == current_user.id)
        return query.order_by(Animal.name.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=AnimalResponse, status_code=status.HTTP_201_CREATED)
def create_animal(
    data: CreateAnimalRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        animal = Animal(owner_id=current_user.id, **data.model_dump())
        db.add(animal)
        db.commit()
        db.refresh(animal)
        return animal
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('/{animal_id}', response_model=AnimalResponse)
def get_animal(animal_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        return _get_owned_animal(animal_id, current_user, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{animal_id}', response_model=AnimalResponse)
def update_animal(
    animal_id: int,
    data: UpdateAnimalRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        animal = _get_owned_animal(animal_id, current_user, db)
        for field_name, value in data.model_dump(exclude_unset=True).items():
            if value is None and field_name not in NULLABLE_ANIMAL_FIELDS:
                continue
            setattr(animal, field_name, value)
        db.commit()
        db.refresh(animal)
        return animal
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
