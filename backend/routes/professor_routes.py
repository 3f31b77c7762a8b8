import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.crud import parse_id
from backend.auth.dependencies import AuthenticatedUser, get_current_user
from backend.core.errors import server_error
from backend.database import get_db
from backend.models.comment import Comment
from backend.models.professor import Professor
from backend.models.user import User
from backend.routes.user_routes import MessageResponse

router = APIRouter(tags=['professors'])

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 10
PROFESSOR_NOT_FOUND = 'Profesor nije pronađen'


class ProfessorSummaryResponse(BaseModel):
    id: int
    profesor: str
    fakultet: str | None = None


class CommentResponse(BaseModel):
    id: int
    profesor_id: int
    user_id: int | None = None
    user_name: str
    ocjena: int
    tekst: str


class ProfessorDetailResponse(BaseModel):
    profesor: str
    fakultet: str | None = None
    zvanje: str | None = None
    slika: str | None = None
    prijediplomski_kolegij: list[str]
    diplomski_kolegij: list[str]
    ocjena: str
    komentari: list[CommentResponse]


class CreateCommentRequest(BaseModel):
    ocjena: StrictInt | StrictFloat | StrictStr | None = None
    tekst: str | None = None


def require_professor_id(value: str) -> int:
    parsed = parse_id(value)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Neispravan ID.')
    return parsed


def parse_rating(value: int | float | str) -> int | None:
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if value < MIN_RATING or value > MAX_RATING:
        return None
    return value


def average_rating(comments: list[Comment]) -> str:
    if not comments:
        return f'{0:.1f}'
    return f'{sum(comment.rating for comment in comments) / len(comments):.1f}'


def to_comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        profesor_id=comment.professor_id,
        user_id=comment.user_id,
        user_name=comment.user_name,
        ocjena=comment.rating,
        tekst=comment.text,
    )


def update_comment(db: Session, professor_id: int, user_id: int, rating: int, text: str) -> bool:
    updated = db.execute(
        update(Comment)
        .where(Comment.professor_id == professor_id, Comment.user_id == user_id)
        .values(rating=rating, text=text)
        .returning(Comment.id)
    ).first()
    db.commit()
    return updated is not None


@router.get('/profesori', response_model=list[ProfessorSummaryResponse])
def list_professors(db: Session = Depends(get_db)):
    try:
        professors = db.execute(select(Professor).order_by(Professor.name.asc())).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception('Greška pri dohvaćanju profesora')
        raise server_error() from exc

    return [
        ProfessorSummaryResponse(id=professor.id, profesor=professor.name, fakultet=professor.faculty)
        for professor in professors
    ]


@router.get('/profesori/{professor_id}', response_model=ProfessorDetailResponse)
def get_professor(professor_id: str, db: Session = Depends(get_db)):
    parsed_id = require_professor_id(professor_id)

    try:
        professor = db.get(Professor, parsed_id)
        if professor is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROFESSOR_NOT_FOUND)

        comments = db.execute(
            select(Comment).where(Comment.professor_id == parsed_id).order_by(Comment.id.asc())
        ).scalars().all()
    except SQLAlchemyError as exc:
        logger.exception('Greška pri dohvaćanju profesora %s', parsed_id)
        raise server_error() from exc

    return ProfessorDetailResponse(
        profesor=professor.name,
        fakultet=professor.faculty,
        zvanje=professor.title,
        slika=professor.image_url,
        prijediplomski_kolegij=professor.undergraduate_courses or [],
        diplomski_kolegij=professor.graduate_courses or [],
        ocjena=average_rating(comments),
        komentari=[to_comment_response(comment) for comment in comments],
    )


@router.post(
    '/profesori/{professor_id}/komentari',
    response_model=CommentResponse | MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    professor_id: str,
    data: CreateCommentRequest,
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parsed_id = require_professor_id(professor_id)
    text = (data.tekst or '').strip()

    if data.ocjena is None or data.ocjena == '' or not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Svi podaci su obavezni')

    rating = parse_rating(data.ocjena)
    if rating is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Ocjena mora biti broj između {MIN_RATING} i {MAX_RATING}',
        )

    try:
        if db.get(Professor, parsed_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROFESSOR_NOT_FOUND)

        if update_comment(db, parsed_id, current_user.id, rating, text):
            response.status_code = status.HTTP_200_OK
            return MessageResponse(message='Komentar ažuriran!')

        author = db.get(User, current_user.id)
        if author is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Korisnik nije pronađen')

        comment = Comment(
            professor_id=parsed_id,
            user_id=author.id,
            user_name=author.name,
            rating=rating,
            text=text,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
    except IntegrityError:
        # Lost the race against a concurrent first comment by the same author.
        db.rollback()
        try:
            update_comment(db, parsed_id, current_user.id, rating, text)
        except SQLAlchemyError as retry_exc:
            db.rollback()
            logger.exception('Greška pri dodavanju komentara')
            raise server_error() from retry_exc
        response.status_code = status.HTTP_200_OK
        return MessageResponse(message='Komentar ažuriran!')
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Greška pri dodavanju komentara')
        raise server_error() from exc

    logger.info('User %s commented on professor %s', current_user.id, parsed_id)
    return to_comment_response(comment)
