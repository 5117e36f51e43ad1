"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
├── auth/    # login, register, refresh, logout, resolve identity
└── users/   # CRUD + soft delete / recover + paginated listings

Import from subpackages:

    from taller_charli.application.usecases.users import CreateUserUseCase
    from taller_charli.application.usecases.auth import LoginUseCase
"""
