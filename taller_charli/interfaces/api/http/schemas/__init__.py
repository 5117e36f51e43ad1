"""DTOs HTTP (pydantic) de auth, users y el sobre común de respuesta."""
