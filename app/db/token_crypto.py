import logging
from cryptography.fernet import Fernet, InvalidToken
from app.config import settings
from app.errors import AppError

logger = logging.getLogger(__name__)

def _fernet() -> Fernet:
    if not settings.fernet_key:
        raise AppError("FERNET_KEY is missing in .env", expose=False)
    return Fernet(settings.fernet_key.encode())

def encrypt_token(plain: str) -> str:
    return _fernet().encrypt(plain.encode()).decode()

def decrypt_token(cipher: str) -> str:
    try:
        return _fernet().decrypt(cipher.encode()).decode()
    except (TypeError, InvalidToken) as e:
        # a rotated FERNET_KEY makes every stored token unreadable
        logger.error("Stored LinkedIn token could not be decrypted: %s", e.__class__.__name__)
        raise AppError("Stored LinkedIn token could not be decrypted", expose=False) from e
