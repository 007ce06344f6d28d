"""
Product persistence (raw SQL).

Listing order is driven by featured placements: each product joins its best
active placement (if any), and the placement tier maps to a sort priority.
"""

from __future__ import annotations

from typing import Any

from core import db

PRODUCT_COLUMNS = """
  p.id, p.seller_id, p.title, p.description, p.hair_type, p.hair_color,
  p.hair_length, p.weight_grams, p.hair_origin, p.hair_texture, p.price_cents,
  p.is_available, p.main_image_url, COALESCE(p.like_count, 0) AS like_count,
  p.created_at, p.updated_at
"""

FEATURED_PRIORITY_SQL = """
  CASE fp.featured_type
    WHEN 'premium' THEN 3
    WHEN 'standard' THEN 2
    WHEN 'highlight' THEN 1
    ELSE 0
  END
"""

EDITABLE_FIELDS = (
    "title",
    "description",
    "hair_type",
    "hair_color",
    "hair_length",
    "weight_grams",
    "hair_origin",
    "hair_texture",
    "price_cents",
    "main_image_url",
)


async def list_products(
    *,
    search: str = "",
    hair_type: str = "",
    hair_color: str = "",
    hair_origin: str = "",
    limit: int = 50,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    Available products, featured first, then newest.

    Empty filter strings disable the corresponding predicate.
    """
    return await db.fetch_all(
        f"""
        SELECT {PRODUCT_COLUMNS},
          up.name AS seller_name,
          up.rating_avg AS seller_rating,
          fp.featured_type,
          fp.expires_at AS featured_expires_at,
          {FEATURED_PRIORITY_SQL} AS featured_priority
        FROM products p
        LEFT JOIN user_profiles up ON up.user_id = p.seller_id
        LEFT JOIN LATERAL (
          SELECT f.featured_type, f.expires_at
          FROM featured_products f
          WHERE f.product_id = p.id
            AND f.is_active = true
            AND f.expires_at > now()
          ORDER BY
            CASE f.featured_type
              WHEN 'premium' THEN 3
              WHEN 'standard' THEN 2
              WHEN 'highlight' THEN 1
              ELSE 0
            END DESC,
            f.expires_at DESC
          LIMIT 1
        ) fp ON true
        WHERE p.is_available = true
          AND ($1 = '' OR p.title ILIKE ('%' || $1 || '%') OR p.description ILIKE ('%' || $1 || '%'))
          AND ($2 = '' OR p.hair_type = $2)
          AND ($3 = '' OR p.hair_color = $3)
          AND ($4 = '' OR p.hair_origin = $4)
        ORDER BY featured_priority DESC, p.created_at DESC, p.id DESC
        LIMIT $5
        OFFSET $6
        """,
        search,
        hair_type,
        hair_color,
        hair_origin,
        limit,
        offset,
    )


async def get_product(product_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {PRODUCT_COLUMNS}
        FROM products p
        WHERE p.id = $1
        """,
        product_id,
    )


async def get_product_detail(product_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {PRODUCT_COLUMNS},
          up.name AS seller_name,
          up.rating_avg AS seller_rating,
          up.rating_count
        FROM products p
        LEFT JOIN user_profiles up ON up.user_id = p.seller_id
        WHERE p.id = $1
        """,
        product_id,
    )


async def get_owned_product(product_id: int, *, seller_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {PRODUCT_COLUMNS}
        FROM products p
        WHERE p.id = $1
          AND p.seller_id = $2
        """,
        product_id,
        seller_id,
    )


async def list_product_images(product_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, product_id, image_url, display_order, created_at, updated_at
        FROM product_images
        WHERE product_id = $1
        ORDER BY display_order, id
        """,
        product_id,
    )


async def create_product(seller_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    values = [fields.get(name) for name in EDITABLE_FIELDS]
    row = await db.fetch_one(
        f"""
        INSERT INTO products AS p (
          seller_id, title, description, hair_type, hair_color, hair_length,
          weight_grams, hair_origin, hair_texture, price_cents, main_image_url
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        RETURNING {PRODUCT_COLUMNS}
        """,
        seller_id,
        *values,
    )
    if row is None:
        raise RuntimeError("Failed to create product.")
    return row


async def update_product(product_id: int, *, seller_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    values = [fields.get(name) for name in EDITABLE_FIELDS]
    return await db.fetch_one(
        f"""
        UPDATE products AS p
        SET title = $3,
            description = $4,
            hair_type = $5,
            hair_color = $6,
            hair_length = $7,
            weight_grams = $8,
            hair_origin = $9,
            hair_texture = $10,
            price_cents = $11,
            main_image_url = $12,
            updated_at = now()
        WHERE p.id = $1
          AND p.seller_id = $2
        RETURNING {PRODUCT_COLUMNS}
        """,
        product_id,
        seller_id,
        *values,
    )


async def add_product_image(product_id: int, *, image_url: str, display_order: int) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO product_images (product_id, image_url, display_order)
        VALUES ($1, $2, $3)
        RETURNING id, product_id, image_url, display_order, created_at, updated_at
        """,
        product_id,
        image_url,
        display_order,
    )
    if row is None:
        raise RuntimeError("Failed to add product image.")
    return row


async def delete_product_cascade(product_id: int) -> bool:
    """
    Delete a product with its images, likes and featured placements.

    Returns False when the product did not exist.
    """
    async with db.transaction() as conn:
        await conn.execute("DELETE FROM product_images WHERE product_id = $1", product_id)
        await conn.execute("DELETE FROM product_likes WHERE product_id = $1", product_id)
        await conn.execute("DELETE FROM featured_products WHERE product_id = $1", product_id)
        status = await conn.execute("DELETE FROM products WHERE id = $1", product_id)
    return db.affected_rows(status) > 0


async def toggle_like(product_id: int, *, user_id: str) -> bool:
    """
    Flip the user's like on a product and keep `like_count` in sync.

    Returns the new state (True = liked).
    """
    async with db.transaction() as conn:
        removed = await conn.fetchrow(
            """
            DELETE FROM product_likes
            WHERE product_id = $1
              AND user_id = $2
            RETURNING id
            """,
            product_id,
            user_id,
        )
        if removed is not None:
            await conn.execute(
                """
                UPDATE products
                SET like_count = like_count - 1
                WHERE id = $1
                  AND like_count > 0
                """,
                product_id,
            )
            return False

        inserted = await conn.fetchrow(
            """
            INSERT INTO product_likes (product_id, user_id)
            VALUES ($1, $2)
            ON CONFLICT (product_id, user_id) DO NOTHING
            RETURNING id
            """,
            product_id,
            user_id,
        )
        if inserted is not None:
            await conn.execute(
                "UPDATE products SET like_count = like_count + 1 WHERE id = $1",
                product_id,
            )
        return True


async def has_liked(product_id: int, *, user_id: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM product_likes
        WHERE product_id = $1
          AND user_id = $2
        LIMIT 1
        """,
        product_id,
        user_id,
    )
    return row is not None


async def list_seller_products(seller_id: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {PRODUCT_COLUMNS}
        FROM products p
        WHERE p.seller_id = $1
          AND p.is_available = true
        ORDER BY p.created_at DESC, p.id DESC
        """,
        seller_id,
    )


async def list_all_products() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {PRODUCT_COLUMNS}, up.name AS seller_name
        FROM products p
        LEFT JOIN user_profiles up ON up.user_id = p.seller_id
        ORDER BY p.created_at DESC, p.id DESC
        """
    )
