from __future__ import annotations

from pathlib import Path

from amp_pr_check.core import CredentialError, atomic_write_bytes, get_logger
from amp_pr_check.process import CommandRunner
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .types import Credential, StorageTarget

log = get_logger(__name__)

# `openssl enc` file layout: magic, 8-byte salt, then AES-CBC ciphertext.
SALT_MAGIC = b"Salted__"
SALT_LEN = 8
KEY_LEN = 32
IV_LEN = 16

_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
}


def derive_key_iv(
    password: bytes, salt: bytes, *, digest: str = "sha256"
) -> tuple[bytes, bytes]:
    """
    OpenSSL's EVP_BytesToKey with a single iteration.

    The digest must match the one used at encryption time; openssl 1.1 uses
    sha256 by default where 1.0 used md5, so it is always passed explicitly.
    """
    try:
        algo = _DIGESTS[digest.lower()]
    except KeyError as e:
        raise CredentialError(f"Unsupported key derivation digest: {digest}") from e

    derived = b""
    block = b""
    while len(derived) < KEY_LEN + IV_LEN:
        h = hashes.Hash(algo())
        h.update(block + password + salt)
        block = h.finalize()
        derived += block
    return derived[:KEY_LEN], derived[KEY_LEN : KEY_LEN + IV_LEN]


def decrypt_bytes(data: bytes, secret: str, *, digest: str = "sha256") -> bytes:
    if not data.startswith(SALT_MAGIC) or len(data) < len(SALT_MAGIC) + SALT_LEN:
        raise CredentialError("Encrypted key is not in openssl salted format")

    salt = data[len(SALT_MAGIC) : len(SALT_MAGIC) + SALT_LEN]
    ciphertext = data[len(SALT_MAGIC) + SALT_LEN :]
    if not ciphertext or len(ciphertext) % 16:
        raise CredentialError("Encrypted key has a truncated ciphertext")

    key, iv = derive_key_iv(secret.encode("utf-8"), salt, digest=digest)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise CredentialError("Bad decrypt: wrong secret or digest") from e


def decrypt_key_file(
    *,
    encrypted_path: Path,
    out_path: Path,
    secret: str,
    digest: str = "sha256",
) -> Path:
    encrypted_path = Path(encrypted_path)
    if not secret:
        raise CredentialError("No decryption secret provided for the storage key")
    try:
        data = encrypted_path.read_bytes()
    except OSError as e:
        raise CredentialError(f"Cannot read encrypted key: {encrypted_path}") from e

    plain = decrypt_bytes(data, secret, digest=digest)
    atomic_write_bytes(Path(out_path), plain, mode=0o600)
    log.info("credential.decrypted", key_file=str(out_path), digest=digest)
    return Path(out_path)


def activate_credential(
    credential: Credential, target: StorageTarget, runner: CommandRunner
) -> None:
    """
    Point the ambient gcloud profile at `credential`.

    Mutates the user's gcloud configuration; two different identities must
    not be activated concurrently from the same environment.
    """
    runner.run_or_fail(
        [
            "gcloud",
            "auth",
            "activate-service-account",
            "--key-file",
            str(credential.key_file),
        ]
    )
    runner.run_or_fail(["gcloud", "config", "set", "account", credential.service_account])
    runner.run_or_fail(["gcloud", "config", "set", "pass_credentials_to_gsutil", "true"])
    runner.run_or_fail(["gcloud", "config", "set", "project", target.project_id])
    runner.run_or_fail(["gcloud", "config", "list"])


def authenticate(
    target: StorageTarget,
    *,
    secret: str,
    runner: CommandRunner,
    root: Path = Path("."),
) -> Credential:
    root = Path(root)
    key_file = decrypt_key_file(
        encrypted_path=root / target.encrypted_key_file,
        out_path=root / target.key_file,
        secret=secret,
        digest=target.key_digest,
    )
    credential = Credential(key_file=key_file, service_account=target.service_account)
    activate_credential(credential, target, runner)
    log.info(
        "credential.activated",
        account=target.service_account,
        project=target.project_id,
    )
    return credential
