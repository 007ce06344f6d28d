"""
Schema bootstrap and demo seed data.

All marketplace user references are TEXT ids issued by the hosted identity
service (see `core/identity.py`), except support staff which live locally.
Statements are idempotent; running them on every startup is safe.
"""

from __future__ import annotations

import logging

from auth import security

from . import db, settings

logger = logging.getLogger(__name__)

TABLES: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS user_profiles (
      id bigserial PRIMARY KEY,
      user_id text NOT NULL UNIQUE,
      name text,
      phone text,
      location text,
      bio text,
      profile_image_url text,
      whatsapp_number text,
      business_name text,
      business_type text,
      is_seller boolean NOT NULL DEFAULT false,
      is_buyer boolean NOT NULL DEFAULT true,
      rating_avg double precision NOT NULL DEFAULT 0,
      rating_count integer NOT NULL DEFAULT 0,
      total_sales integer NOT NULL DEFAULT 0,
      total_purchases integer NOT NULL DEFAULT 0,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
      id bigserial PRIMARY KEY,
      seller_id text NOT NULL,
      title text NOT NULL,
      description text,
      hair_type text,
      hair_color text,
      hair_length double precision,
      weight_grams double precision,
      hair_origin text,
      hair_texture text,
      price_cents integer NOT NULL CHECK (price_cents > 0),
      is_available boolean NOT NULL DEFAULT true,
      main_image_url text,
      like_count integer NOT NULL DEFAULT 0,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS product_images (
      id bigserial PRIMARY KEY,
      product_id bigint NOT NULL,
      image_url text NOT NULL,
      display_order integer NOT NULL DEFAULT 0,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS product_likes (
      id bigserial PRIMARY KEY,
      product_id bigint NOT NULL,
      user_id text NOT NULL,
      created_at timestamptz NOT NULL DEFAULT now(),
      UNIQUE (product_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS featured_products (
      id bigserial PRIMARY KEY,
      product_id bigint NOT NULL,
      seller_id text NOT NULL,
      featured_type text NOT NULL CHECK (featured_type IN ('premium', 'standard', 'highlight')),
      price_paid_cents integer NOT NULL,
      expires_at timestamptz NOT NULL,
      is_active boolean NOT NULL DEFAULT true,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS uploaded_images (
      id text PRIMARY KEY,
      user_id text NOT NULL,
      filename text NOT NULL,
      content_type text NOT NULL,
      data_url text NOT NULL,
      file_size integer NOT NULL,
      created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
      id bigserial PRIMARY KEY,
      buyer_id text NOT NULL,
      seller_id text NOT NULL,
      product_id bigint NOT NULL,
      amount_cents integer NOT NULL,
      status text NOT NULL DEFAULT 'pending',
      payment_method text,
      notes text,
      escrow_released boolean NOT NULL DEFAULT false,
      delivery_confirmed_at timestamptz,
      admin_released_at timestamptz,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transaction_updates (
      id bigserial PRIMARY KEY,
      transaction_id bigint NOT NULL,
      status text NOT NULL,
      comment text,
      updated_by text NOT NULL,
      created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reviews (
      id bigserial PRIMARY KEY,
      transaction_id bigint NOT NULL,
      reviewer_id text NOT NULL,
      reviewed_id text NOT NULL,
      rating integer NOT NULL CHECK (rating >= 1 AND rating <= 5),
      comment text,
      review_type text NOT NULL,
      is_featured boolean NOT NULL DEFAULT false,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now(),
      UNIQUE (transaction_id, reviewer_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profile_reviews (
      id bigserial PRIMARY KEY,
      reviewer_id text NOT NULL,
      reviewed_id text NOT NULL,
      rating integer NOT NULL CHECK (rating >= 1 AND rating <= 5),
      comment text,
      is_visible boolean NOT NULL DEFAULT true,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now(),
      UNIQUE (reviewer_id, reviewed_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS review_responses (
      id bigserial PRIMARY KEY,
      review_id bigint NOT NULL,
      review_type text NOT NULL CHECK (review_type IN ('transaction', 'profile')),
      responder_id text NOT NULL,
      response_text text NOT NULL,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_conversations (
      id bigserial PRIMARY KEY,
      buyer_id text NOT NULL,
      seller_id text NOT NULL,
      product_id bigint NOT NULL,
      last_message_at timestamptz NOT NULL DEFAULT now(),
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now(),
      UNIQUE (buyer_id, seller_id, product_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_messages (
      id bigserial PRIMARY KEY,
      conversation_id bigint NOT NULL,
      sender_id text NOT NULL,
      message text NOT NULL,
      message_type text NOT NULL DEFAULT 'text',
      image_url text,
      is_read boolean NOT NULL DEFAULT false,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_users (
      id bigserial PRIMARY KEY,
      user_id text NOT NULL UNIQUE,
      role text NOT NULL DEFAULT 'admin',
      permissions jsonb NOT NULL DEFAULT '{}'::jsonb,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_setup (
      id bigserial PRIMARY KEY,
      setup_key text NOT NULL UNIQUE,
      is_used boolean NOT NULL DEFAULT false,
      used_by text,
      created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_actions (
      id bigserial PRIMARY KEY,
      admin_id text NOT NULL,
      target_user_id text NOT NULL,
      action_type text NOT NULL CHECK (action_type IN ('block', 'unblock', 'warn', 'review', 'note')),
      reason text,
      notes text,
      created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS blocked_users (
      id bigserial PRIMARY KEY,
      user_id text NOT NULL UNIQUE,
      blocked_by text NOT NULL,
      reason text,
      blocked_at timestamptz NOT NULL DEFAULT now(),
      expires_at timestamptz
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_conversations (
      id bigserial PRIMARY KEY,
      admin_id text NOT NULL,
      user_id text NOT NULL,
      conversation_type text NOT NULL DEFAULT 'admin_chat',
      last_message_at timestamptz NOT NULL DEFAULT now(),
      created_at timestamptz NOT NULL DEFAULT now(),
      UNIQUE (admin_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS admin_messages (
      id bigserial PRIMARY KEY,
      admin_id text NOT NULL,
      user_id text NOT NULL,
      subject text,
      message text NOT NULL,
      message_type text NOT NULL DEFAULT 'notification',
      is_read boolean NOT NULL DEFAULT false,
      created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS support_staff (
      id bigserial PRIMARY KEY,
      username text NOT NULL UNIQUE,
      password_hash text NOT NULL,
      name text NOT NULL,
      email text NOT NULL,
      role text NOT NULL DEFAULT 'support',
      is_active boolean NOT NULL DEFAULT true,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS support_tickets (
      id bigserial PRIMARY KEY,
      user_id text,
      user_name text NOT NULL,
      user_email text NOT NULL,
      subject text NOT NULL,
      message text NOT NULL,
      status text NOT NULL DEFAULT 'open'
        CHECK (status IN ('open', 'in_progress', 'resolved', 'closed')),
      priority text NOT NULL DEFAULT 'medium'
        CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
      category text NOT NULL DEFAULT 'general'
        CHECK (category IN ('technical', 'transaction', 'account', 'product', 'general')),
      assigned_to text,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS support_responses (
      id bigserial PRIMARY KEY,
      ticket_id bigint NOT NULL,
      responder_id text NOT NULL,
      responder_name text NOT NULL,
      message text NOT NULL,
      is_internal boolean NOT NULL DEFAULT false,
      created_at timestamptz NOT NULL DEFAULT now(),
      updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
]

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS products_seller_idx ON products (seller_id)",
    "CREATE INDEX IF NOT EXISTS products_available_created_idx ON products (is_available, created_at DESC)",
    "CREATE INDEX IF NOT EXISTS featured_products_product_idx ON featured_products (product_id, expires_at)",
    "CREATE INDEX IF NOT EXISTS chat_messages_conversation_idx ON chat_messages (conversation_id, created_at)",
    "CREATE INDEX IF NOT EXISTS transactions_buyer_idx ON transactions (buyer_id)",
    "CREATE INDEX IF NOT EXISTS transactions_seller_idx ON transactions (seller_id)",
]

DEMO_SELLERS = [
    ("demo_seller_1", "Salão Beauty Pro", "Beauty Pro Studio"),
    ("demo_seller_2", "Mega Hair Premium", "Premium Hair Solutions"),
]

DEMO_PRODUCTS = [
    (
        "demo_seller_1",
        "Mega Hair Liso Premium 60cm",
        "Mega hair 100% natural, liso sedoso, 60cm de comprimento",
        "liso",
        "castanho",
        35000,
        "https://images.unsplash.com/photo-1562322140-8baeececf3df?w=400&h=400&fit=crop",
    ),
    (
        "demo_seller_2",
        "Mega Hair Cacheado Natural 50cm",
        "Cabelo cacheado natural, textura 3B, perfeito para volume",
        "cacheado",
        "preto",
        42000,
        "https://images.unsplash.com/photo-1594736797933-d0280ba600ba?w=400&h=400&fit=crop",
    ),
]

DEMO_SUPPORT_STAFF = [
    ("suporte", "Equipe Suporte", "suporte@cabelostrade.com"),
    ("atendimento", "Atendimento CabelosTrade", "atendimento@cabelostrade.com"),
]


async def create_tables() -> None:
    async with db.transaction() as conn:
        for statement in TABLES + INDEXES:
            await conn.execute(statement)


async def seed_demo_data() -> None:
    async with db.transaction() as conn:
        await conn.executemany(
            """
            INSERT INTO user_profiles (user_id, name, is_seller, business_name)
            VALUES ($1, $2, true, $3)
            ON CONFLICT (user_id) DO NOTHING
            """,
            DEMO_SELLERS,
        )
        await conn.executemany(
            """
            INSERT INTO products (seller_id, title, description, hair_type, hair_color, price_cents, main_image_url)
            SELECT $1::text, $2::text, $3::text, $4::text, $5::text, $6::integer, $7::text
            WHERE NOT EXISTS (SELECT 1 FROM products WHERE seller_id = $1::text AND title = $2::text)
            """,
            DEMO_PRODUCTS,
        )


async def seed_support_staff(password: str) -> None:
    password_hash = security.hash_password(password)
    async with db.transaction() as conn:
        await conn.executemany(
            """
            INSERT INTO support_staff (username, password_hash, name, email, role)
            VALUES ($1, $2, $3, $4, 'support')
            ON CONFLICT (username) DO NOTHING
            """,
            [(username, password_hash, name, email) for (username, name, email) in DEMO_SUPPORT_STAFF],
        )


async def ensure_schema() -> None:
    """
    Startup hook: create tables and optionally seed demo rows.
    """
    if not settings.schema_auto_create():
        logger.info("schema_bootstrap_skipped")
        return

    await create_tables()
    logger.info("schema_ready tables=%s", len(TABLES))

    if settings.seed_demo_data():
        await seed_demo_data()
        logger.info("demo_data_seeded sellers=%s products=%s", len(DEMO_SELLERS), len(DEMO_PRODUCTS))

    password = settings.support_seed_password()
    if password:
        await seed_support_staff(password)
        logger.info("support_staff_seeded count=%s", len(DEMO_SUPPORT_STAFF))
