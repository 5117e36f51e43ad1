"""
Tabla `users`: perfil local, rol y soft delete.

- Email y DNI son únicos entre TODAS las filas, incluidas las eliminadas.
  Los nombres uq_users_email / uq_users_dni los lee el repositorio Postgres
  para saber qué campo chocó.
- role es texto con CHECK en lugar de un ENUM nativo.
- deleted_at NULL = activo; indexado para separar activos de eliminados.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_users"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("dni", sa.String(10), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column(
            "role",
            sa.String(10),
            nullable=False,
            server_default=sa.text("'CLIENT'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        # NULL => activo
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("dni", name="uq_users_dni"),
        sa.CheckConstraint("role IN ('ADMIN', 'CLIENT')", name="ck_users_role"),
    )

    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])
    op.create_index("ix_users_created_at", "users", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_users_created_at", table_name="users")
    op.drop_index("ix_users_deleted_at", table_name="users")
    op.drop_table("users")
