"""Initial schema: catalog, rate configuration and quotes."""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.current_timestamp()),
    ]


def upgrade():
    op.create_table(
        "materials",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("cost_per_kg", sa.Float, nullable=False),
        sa.Column("notes", sa.String, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("idx_materials_name", "materials", ["name"])
    op.create_index("idx_materials_active", "materials", ["active"])

    op.create_table(
        "rate_config",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("machine_hourly_rate", sa.Float, nullable=False, server_default="0"),
        sa.Column("labor_per_minute", sa.Float, nullable=False, server_default="0"),
        sa.Column("overhead_fixed", sa.Float, nullable=False, server_default="0"),
        sa.Column("overhead_percent", sa.Float, nullable=False, server_default="0"),
        sa.Column("failure_rate_percent", sa.Float, nullable=False, server_default="0"),
        sa.Column("tax_percent", sa.Float, nullable=False, server_default="0"),
        sa.Column("currency", sa.String, nullable=False, server_default="COP"),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint("id = 1", name="chk_rate_config_singleton"),
    )

    op.create_table(
        "shipping_rates",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("scope", sa.String, nullable=False),
        sa.Column("country", sa.String, nullable=False),
        sa.Column("city", sa.String, nullable=True),
        sa.Column("flat_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("notes", sa.String, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index(
        "idx_shipping_rates_scope_country_city", "shipping_rates", ["scope", "country", "city"]
    )
    op.create_index("idx_shipping_rates_active", "shipping_rates", ["active"])

    op.create_table(
        "packaging_rates",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("flat_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("notes", sa.String, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("idx_packaging_rates_name", "packaging_rates", ["name"])
    op.create_index("idx_packaging_rates_active", "packaging_rates", ["active"])

    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.current_timestamp()),
        sa.Column("title", sa.String, nullable=True),
        sa.Column("notes", sa.String, nullable=True),
        sa.Column("waste_percent", sa.Float, nullable=False),
        sa.Column("margin_percent", sa.Float, nullable=False),
        sa.Column("tax_enabled", sa.Boolean, nullable=False),
        sa.Column("tax_percent_snapshot", sa.Float, nullable=False),
        sa.Column("totals_json", sa.Text, nullable=False),
        sa.Column("breakdown_json", sa.Text, nullable=False),
    )
    op.create_index("idx_quotes_created_at", "quotes", ["created_at"])

    op.create_table(
        "quote_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "quote_id",
            sa.Integer,
            sa.ForeignKey("quotes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("material_id", sa.Integer, sa.ForeignKey("materials.id"), nullable=False),
        sa.Column("grams", sa.Float, nullable=False),
        sa.Column("print_minutes", sa.Float, nullable=False),
        sa.Column("labor_minutes", sa.Float, nullable=False),
        sa.Column("quantity", sa.Float, nullable=False),
    )
    op.create_index("ix_quote_items_quote_id", "quote_items", ["quote_id"])
    op.create_index("ix_quote_items_material_id", "quote_items", ["material_id"])


def downgrade():
    op.drop_table("quote_items")
    op.drop_table("quotes")
    op.drop_table("packaging_rates")
    op.drop_table("shipping_rates")
    op.drop_table("rate_config")
    op.drop_table("materials")
