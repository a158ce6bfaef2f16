from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from schelper.database import get_db
from schelper.models.class_property import ClassProperty
from schelper.models.tag import Tag, class_tags
from schelper.schemas.tag import TagCreate, TagMapOut, TagOut
from schelper.utils.auth import get_current_user

import logging
logger = logging.getLogger("schelper.tags")


router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("", response_model=list[TagOut])
def list_tags(db: Session = Depends(get_db)):
    return db.query(Tag).order_by(Tag.name.asc()).all()


@router.get("/map", response_model=TagMapOut)
def tag_map(db: Session = Depends(get_db)):
    """
    tag name -> ids of the classes carrying it. Tags with no classes are left out.
    """
    tags = db.query(Tag).options(selectinload(Tag.properties)).order_by(Tag.name.asc()).all()
    out = {}
    for t in tags:
        ids = sorted(p.class_id for p in t.properties)
        if ids:
            out[t.name] = ids
    return out


@router.post("", response_model=TagOut, status_code=201)
def create_tag(
    body: TagCreate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    if db.query(Tag.id).filter(Tag.name == body.name).first():
        raise HTTPException(status_code=400, detail="Tag already exists")

    tag = Tag(name=body.name)
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Tag already exists")
    db.refresh(tag)

    logger.info("Tag %s created by %s", tag.name, user.username)
    return tag


@router.post("/unlink-all")
def unlink_all_tags_from_all_classes(
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    """Strip every tag from every class. The tags themselves stay."""
    deleted = db.execute(class_tags.delete()).rowcount
    db.commit()
    logger.info("All tag links removed by %s (%d links)", user.username, deleted)
    return {"detail": "unlinked", "unlinked": deleted}


@router.delete("/{tag_name}")
def delete_tag(
    tag_name: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    tag = (
        db.query(Tag)
        .options(selectinload(Tag.properties).selectinload(ClassProperty.tags))
        .filter(Tag.name == tag_name.strip())
        .first()
    )
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")

    # unlink from every class first, then drop the tag
    unlinked = len(tag.properties)
    for p in list(tag.properties):
        p.tags.remove(tag)
    db.delete(tag)
    db.commit()

    logger.info("Tag %s deleted by %s (unlinked from %d classes)", tag_name, user.username, unlinked)
    return {"detail": "deleted", "unlinked": unlinked}
