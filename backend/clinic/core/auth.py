from passlib.context import CryptContext

# Update the CryptContext initialization to explicitly set bcrypt backend options
# This will suppress the warning about '__about__' attribute
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__ident="2b",  # Explicitly set the bcrypt identifier
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
