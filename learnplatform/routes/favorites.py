# learnplatform/routes/favorites.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Favorite, User
from ..schemas import FavoriteCheck, FavoriteCreate, FavoriteOut, FavoriteWithDetails, ItemType, SuccessOut
from ..security import get_current_user, require_admin
from ..views import favorite_with_details, load_item
from .common import commit_or_400

router = APIRouter()

ALREADY_FAVORITE = "العنصر موجود بالفعل في المفضلة"


@router.get("/favorites", response_model=List[FavoriteWithDetails])
def list_favorites(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    favorites = (
        db.query(Favorite)
        .filter(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc(), Favorite.id)
        .all()
    )
    return [favorite_with_details(db, f) for f in favorites]


@router.get("/favorites/check", response_model=FavoriteCheck)
def check_favorite(
    item_id: str = Query(..., alias="itemId"),
    item_type: ItemType = Query(..., alias="itemType"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    favorite = db.query(Favorite).filter(
        Favorite.user_id == user.id,
        Favorite.item_id == item_id,
        Favorite.item_type == item_type,
    ).first()
    return FavoriteCheck(is_favorite=favorite is not None, favorite_id=favorite.id if favorite else None)


@router.post("/favorites", response_model=FavoriteOut, status_code=201)
def add_favorite(
    data: FavoriteCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if load_item(db, data.item_type, data.item_id) is None:
        raise HTTPException(status_code=404, detail="العنصر غير موجود")
    existing = db.query(Favorite).filter(
        Favorite.user_id == user.id,
        Favorite.item_id == data.item_id,
        Favorite.item_type == data.item_type,
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail=ALREADY_FAVORITE)

    favorite = Favorite(user_id=user.id, item_id=data.item_id, item_type=data.item_type)
    db.add(favorite)
    commit_or_400(db, ALREADY_FAVORITE)
    db.refresh(favorite)
    return favorite


@router.delete("/favorites/{favorite_id}", response_model=SuccessOut)
def remove_favorite(
    favorite_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    favorite = db.get(Favorite, favorite_id)
    if favorite is None or favorite.user_id != user.id:
        raise HTTPException(status_code=404, detail="العنصر غير موجود في المفضلة")
    db.delete(favorite)
    db.commit()
    return SuccessOut()


@router.get("/admin/favorites", response_model=List[FavoriteWithDetails])
def admin_list_favorites(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    favorites = db.query(Favorite).order_by(Favorite.created_at.desc(), Favorite.id).all()
    return [favorite_with_details(db, f, include_user=True) for f in favorites]
