from sqlalchemy.orm import Session
from decimal import Decimal
import logging

from models.carts import Cart, CartItem
from models.products import Product

logger = logging.getLogger(__name__)

def get_or_create_cart(db: Session, customer_id: int) -> Cart:
    cart = db.query(Cart).filter(Cart.customer_id == customer_id).first()
    if cart is None:
        cart = Cart(customer_id=customer_id)
        db.add(cart)
        db.commit()
        db.refresh(cart)
    return cart

def cart_summary(cart: Cart) -> dict:
    items = []
    sub_total = Decimal("0.00")
    total_items = 0
    for item in cart.items:
        line_total = Decimal(item.price_snapshot) * item.quantity
        sub_total += line_total
        total_items += item.quantity
        product = item.product
        media = (product.media or []) if product else []
        in_stock = bool(product) and product.is_active and (
            not product.inventory_tracking_enabled or (product.stock_qty or 0) >= item.quantity
        )
        items.append({
            "id": item.id,
            "product_id": item.product_id,
            "name_snapshot": item.name_snapshot,
            "price_snapshot": item.price_snapshot,
            "quantity": item.quantity,
            "line_total": line_total,
            "image": media[0] if media and isinstance(media[0], str) else None,
            "in_stock": in_stock,
        })
    return {
        "id": cart.id,
        "items": items,
        "sub_total": sub_total,
        "total_items": total_items,
        "total_unique_items": len(items),
    }

def _available_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.is_active == True).first()
    if not product:
        raise LookupError("Product not found or unavailable")
    return product

def _check_stock(product: Product, quantity: int):
    if product.inventory_tracking_enabled and (product.stock_qty or 0) < quantity:
        raise ValueError(f"Only {product.stock_qty or 0} of {product.name} left in stock")

def add_item(db: Session, customer_id: int, product_id: int, quantity: int) -> Cart:
    """Add a product to the cart, merging with an existing line for the same product."""
    product = _available_product(db, product_id)
    cart = get_or_create_cart(db, customer_id)
    item = db.query(CartItem).filter(CartItem.cart_id == cart.id, CartItem.product_id == product_id).first()
    new_quantity = quantity + (item.quantity if item else 0)
    _check_stock(product, new_quantity)

    if item:
        item.quantity = new_quantity
        item.price_snapshot = product.price
    else:
        db.add(CartItem(
            cart_id=cart.id,
            product_id=product.id,
            name_snapshot=product.name,
            price_snapshot=product.price,
            quantity=quantity,
        ))
    db.commit()
    db.refresh(cart)
    return cart

def update_item(db: Session, customer_id: int, item_id: int, quantity: int) -> Cart:
    cart = get_or_create_cart(db, customer_id)
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise LookupError("Cart item not found")
    if quantity == 0:
        db.delete(item)
    else:
        _check_stock(item.product, quantity)
        item.quantity = quantity
    db.commit()
    db.refresh(cart)
    return cart

def remove_item(db: Session, customer_id: int, item_id: int) -> Cart:
    return update_item(db, customer_id, item_id, 0)

def clear_cart(db: Session, customer_id: int):
    cart = db.query(Cart).filter(Cart.customer_id == customer_id).first()
    if cart:
        db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
        db.commit()
        db.expire(cart, ["items"])
    return cart
