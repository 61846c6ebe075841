"""
Encryption utilities for sensitive environment variables.
Secrets such as JWT signing keys may be stored Fernet-encrypted in the
environment; ECOTASK_ENCRYPTION_KEY holds the Fernet key used to read them.
"""

import os
import base64
import logging
from cryptography.fernet import Fernet, InvalidToken

# Environment variable name for the encryption key
ENCRYPTION_KEY_ENV = 'ECOTASK_ENCRYPTION_KEY'

def get_encryption_key() -> bytes:
    """
    Get the Fernet key from the environment.
    If not set, generates a temporary key and logs a warning; values
    encrypted with a temporary key cannot be read back by another process.
    """
    key_str = os.environ.get(ENCRYPTION_KEY_ENV)

    if not key_str:
        logging.warning("ECOTASK_ENCRYPTION_KEY not set in environment. Generating temporary key.")
        return Fernet.generate_key()

    return key_str.encode()

def encrypt_value(value: str, key: bytes = None) -> str:
    """
    Encrypt a string value using Fernet encryption.

    Args:
        value: The string value to encrypt
        key: Optional Fernet key (defaults to get_encryption_key())

    Returns:
        Base64 encoded encrypted string
    """
    if not value:
        return ""

    fernet = Fernet(key or get_encryption_key())
    encrypted = fernet.encrypt(value.encode())
    return base64.urlsafe_b64encode(encrypted).decode()

def decrypt_value(encrypted_value: str, key: bytes = None) -> str:
    """
    Decrypt a base64 encoded encrypted string.

    Raises:
        ValueError: if the value is not a token produced by encrypt_value
    """
    if not encrypted_value:
        return ""

    try:
        fernet = Fernet(key or get_encryption_key())
        encrypted_bytes = base64.urlsafe_b64decode(encrypted_value)
        return fernet.decrypt(encrypted_bytes).decode()
    except (InvalidToken, ValueError, TypeError) as e:
        logging.error(f"Failed to decrypt value: {e}")
        raise ValueError("Failed to decrypt value") from e

def get_encrypted_env_var(env_var_name: str, default: str = None) -> str:
    """
    Get and decrypt an environment variable.
    Plain (unencrypted) values are returned as-is so development setups can
    skip encryption entirely.
    """
    encrypted_value = os.environ.get(env_var_name)
    if encrypted_value is None:
        return default

    if not os.environ.get(ENCRYPTION_KEY_ENV):
        return encrypted_value

    try:
        return decrypt_value(encrypted_value)
    except ValueError:
        logging.warning(f"Failed to decrypt {env_var_name}, returning raw value")
        return encrypted_value

def get_jwt_secret_key(key_type: str) -> str:
    """
    Get a JWT secret key by rotation slot.

    Args:
        key_type: Type of key ('CURRENT', 'PREVIOUS', 'NEXT')

    Returns:
        Decrypted JWT secret key or None if not set
    """
    key = get_encrypted_env_var(f"JWT_SECRET_KEY_{key_type}")
    if key:
        return key

    # Fallback to legacy single key
    if key_type == 'CURRENT':
        return get_encrypted_env_var('JWT_SECRET_KEY')

    return None

if __name__ == "__main__":
    # Encrypt a value for use in the environment:
    #   ECOTASK_ENCRYPTION_KEY=... python api/encryption_utils.py "my-secret"
    import sys
    print(encrypt_value(sys.argv[1]))
