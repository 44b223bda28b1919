"""Users, properties and property tours, with the tour overlap exclusion constraint."""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "4c2b7f1d9a31"
down_revision = None
branch_labels = None
depends_on = None

user_role = postgresql.ENUM("user", "agent", "admin", name="user_role", create_type=False)
property_type = postgresql.ENUM(
    "apartment", "villa", "penthouse", "townhouse", "office", "retail", "land",
    name="property_type", create_type=False,
)
listing_type = postgresql.ENUM("buy", "rent", "sell", name="listing_type", create_type=False)
tour_status = postgresql.ENUM(
    "pending", "confirmed", "completed", "canceled", name="tour_status", create_type=False,
)


def upgrade():
    bind = op.get_bind()
    for enum_type in (user_role, property_type, listing_type, tour_status):
        enum_type.create(bind, checkfirst=True)

    # Needed to combine the uuid equality with the range overlap in one GiST index
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String, nullable=False, unique=True),
        sa.Column("full_name", sa.String, nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="user"),
        sa.Column("phone", sa.String),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "properties",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("state", sa.String(120)),
        sa.Column("zip_code", sa.String(20)),
        sa.Column("country", sa.String(120), nullable=False),
        sa.Column("latitude", sa.Float),
        sa.Column("longitude", sa.Float),
        sa.Column("bedrooms", sa.Integer),
        sa.Column("bathrooms", sa.Float),
        sa.Column("square_feet", sa.Float),
        sa.Column("lot_size", sa.Float),
        sa.Column("property_type", property_type, nullable=False),
        sa.Column("listing_type", listing_type, nullable=False),
        sa.Column("features", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("images", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_premium", sa.Boolean, server_default=sa.false()),
        sa.Column("is_verified", sa.Boolean, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        sa.CheckConstraint("(latitude IS NULL) = (longitude IS NULL)", name="ck_properties_lat_lng_paired"),
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])
    op.create_index("ix_properties_price", "properties", ["price"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_lat_lng", "properties", ["latitude", "longitude"])
    op.execute("CREATE INDEX ix_properties_features ON properties USING gin (features)")

    op.create_table(
        "property_tours",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("property_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("agent_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", tour_status, nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_time > scheduled_date", name="ck_property_tours_end_after_start"),
    )
    op.create_index("ix_property_tours_user_id", "property_tours", ["user_id"])
    op.create_index("ix_property_tours_agent_id", "property_tours", ["agent_id"])
    op.create_index("ix_property_tours_property_schedule", "property_tours", ["property_id", "scheduled_date"])

    # Two active tours of one property may never share an instant; '[)' lets slots abut
    op.execute(
        """
        ALTER TABLE property_tours
        ADD CONSTRAINT property_tours_no_overlap
        EXCLUDE USING gist (
            property_id WITH =,
            tstzrange(scheduled_date, end_time, '[)') WITH &&
        )
        WHERE (status IN ('pending', 'confirmed'))
        """
    )


def downgrade():
    op.drop_table("property_tours")
    op.drop_table("properties")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (tour_status, listing_type, property_type, user_role):
        enum_type.drop(bind, checkfirst=True)
