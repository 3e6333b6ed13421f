# learnplatform/routes/cart.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import CartItem, User
from ..schemas import CartItemCreate, CartItemOut, CartItemWithDetails, CartSummary, CountOut, SuccessOut
from ..security import get_current_user, require_admin
from ..views import cart_item_with_details, cart_total, load_item
from .common import commit_or_400

router = APIRouter()

ALREADY_IN_CART = "العنصر موجود بالفعل في السلة"


def user_cart(db: Session, user_id: str) -> List[CartItem]:
    return (
        db.query(CartItem)
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id)
        .all()
    )


@router.get("/cart", response_model=List[CartItemWithDetails])
def get_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [cart_item_with_details(db, item) for item in user_cart(db, user.id)]


@router.get("/cart/count", response_model=CountOut)
def get_cart_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return CountOut(count=db.query(CartItem).filter(CartItem.user_id == user.id).count())


@router.get("/cart/summary", response_model=CartSummary)
def get_cart_summary(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    items = [cart_item_with_details(db, item) for item in user_cart(db, user.id)]
    return CartSummary(items=items, count=len(items), total=cart_total(items))


@router.post("/cart", response_model=CartItemOut, status_code=201)
def add_to_cart(
    data: CartItemCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if load_item(db, data.item_type, data.item_id) is None:
        raise HTTPException(status_code=404, detail="العنصر غير موجود")
    existing = db.query(CartItem).filter(
        CartItem.user_id == user.id,
        CartItem.item_id == data.item_id,
        CartItem.item_type == data.item_type,
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail=ALREADY_IN_CART)

    item = CartItem(user_id=user.id, item_id=data.item_id, item_type=data.item_type)
    db.add(item)
    commit_or_400(db, ALREADY_IN_CART)
    db.refresh(item)
    return item


@router.delete("/cart/{item_id}", response_model=SuccessOut)
def remove_from_cart(
    item_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    item = db.get(CartItem, item_id)
    if item is None or item.user_id != user.id:
        raise HTTPException(status_code=404, detail="العنصر غير موجود في السلة")
    db.delete(item)
    db.commit()
    return SuccessOut()


@router.delete("/cart", response_model=SuccessOut)
def clear_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.query(CartItem).filter(CartItem.user_id == user.id).delete()
    db.commit()
    return SuccessOut()


@router.get("/admin/cart-items", response_model=List[CartItemWithDetails])
def admin_list_cart_items(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    items = db.query(CartItem).order_by(CartItem.created_at.desc(), CartItem.id).all()
    return [cart_item_with_details(db, item) for item in items]
