"""
Alta del primer perfil ADMIN local (idempotente).

Uso:
    DATABASE_URL=postgresql://... python scripts/create_admin.py \
        --email admin@taller.test --first-name Ana --last-name Pérez --dni 30111222

Notas:
  - Solo escribe la fila en `users`. La cuenta con el mismo email tiene que
    existir en Supabase Auth para poder hacer login.
  - Si ya hay un perfil activo con ese email no se toca, salvo --promote
    (lo pasa a ADMIN).
"""

from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

import psycopg

from taller_charli.domain.entities import UserRole

CREATE = "create"
PROMOTE = "promote"
KEEP = "keep"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--email", required=True)
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    parser.add_argument("--dni", required=True, help="entre 8 y 10 caracteres")
    parser.add_argument("--phone")
    parser.add_argument(
        "--promote",
        action="store_true",
        help="convierte en ADMIN un perfil CLIENT activo con ese email",
    )
    return parser


def decide_action(existing: Optional[tuple], promote: bool) -> str:
    """`existing` es (id, role, deleted_at) o None si el email no existe."""
    if existing is None:
        return CREATE
    user_id, role, deleted_at = existing
    if deleted_at is not None:
        raise SystemExit(f"El usuario {user_id} está eliminado: recuperarlo primero")
    if role != UserRole.ADMIN.value and promote:
        return PROMOTE
    return KEEP


def run(conn: psycopg.Connection, args: argparse.Namespace) -> str:
    email = args.email.strip().lower()
    dni = args.dni.strip()
    if not email:
        raise SystemExit("El email es obligatorio")
    if not 8 <= len(dni) <= 10:
        raise SystemExit("El DNI debe tener entre 8 y 10 caracteres")

    admin = UserRole.ADMIN.value
    with conn.cursor() as cur:
        cur.execute(
            "SELECT id, role, deleted_at FROM users WHERE email = %s", (email,)
        )
        existing = cur.fetchone()
        action = decide_action(existing, args.promote)

        if action == PROMOTE:
            cur.execute(
                "UPDATE users SET role = %s, updated_at = now() WHERE id = %s",
                (admin, existing[0]),
            )
            message = f"promovido: id={existing[0]} email={email}"
        elif action == KEEP:
            message = f"sin cambios: id={existing[0]} email={email} role={existing[1]}"
        else:
            try:
                cur.execute(
                    "INSERT INTO users (first_name, last_name, dni, email, phone, role)"
                    " VALUES (%s, %s, %s, %s, %s, %s) RETURNING id",
                    (
                        args.first_name.strip(),
                        args.last_name.strip(),
                        dni,
                        email,
                        args.phone,
                        admin,
                    ),
                )
            except psycopg.errors.UniqueViolation as exc:
                raise SystemExit(f"El DNI {dni} ya está registrado") from exc
            message = f"creado: id={cur.fetchone()[0]} email={email}"

    conn.commit()
    print(message)
    return action


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("Falta DATABASE_URL")
    with psycopg.connect(db_url) as conn:
        run(conn, args)


if __name__ == "__main__":
    main()
