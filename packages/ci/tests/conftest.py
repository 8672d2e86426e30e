from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Mapping, Sequence

import pytest
from amp_pr_check.console import Reporter
from amp_pr_check.core import CommandFailedError
from amp_pr_check.process import CommandResult, CommandRunner
from rich.console import Console


class FakeRunner(CommandRunner):
    """
    Records every command instead of executing it.

    `handlers` map an argv prefix to a callable returning an exit status;
    `outputs` map an argv prefix to the stdout `capture` returns.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, ...]] = []
        self.envs: list[dict[str, str] | None] = []
        self.handlers: list[tuple[tuple[str, ...], Callable[[tuple[str, ...]], int]]] = []
        self.outputs: dict[tuple[str, ...], str | None] = {}

    def on(self, prefix: Sequence[str], fn: Callable[[tuple[str, ...]], int]) -> None:
        self.handlers.append((tuple(prefix), fn))

    def fail(self, prefix: Sequence[str], code: int = 1) -> None:
        self.on(prefix, lambda _argv: code)

    def run(
        self, argv: Sequence[str], *, env: Mapping[str, str] | None = None
    ) -> CommandResult:
        args = tuple(str(a) for a in argv)
        self.calls.append(args)
        self.envs.append(dict(env) if env is not None else None)
        for prefix, fn in self.handlers:
            if args[: len(prefix)] == prefix:
                return CommandResult(argv=args, returncode=fn(args))
        return CommandResult(argv=args, returncode=0)

    def capture(self, argv: Sequence[str]) -> str:
        args = tuple(str(a) for a in argv)
        self.calls.append(args)
        for prefix, out in self.outputs.items():
            if args[: len(prefix)] == prefix:
                if out is None:
                    raise CommandFailedError(args, 1)
                return out
        return ""


class FakeClock:
    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(console_buffer: io.StringIO, clock: FakeClock) -> Reporter:
    console = Console(file=console_buffer, width=300, color_system=None, highlight=False)
    return Reporter(console, clock=clock)


def write_tree(root: Path, files: Mapping[str, bytes | str]) -> None:
    for rel, content in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            p.write_text(content, encoding="utf-8")
        else:
            p.write_bytes(content)


@pytest.fixture
def tree_writer() -> Callable[[Path, Mapping[str, bytes | str]], None]:
    return write_tree


def openssl_encrypt(
    plain: bytes, secret: str, *, salt: bytes = b"saltsalt", digest: str = "sha256"
) -> bytes:
    """Same layout as `openssl enc -aes-256-cbc -md <digest> -k <secret>`."""
    from amp_pr_check.storage.credentials import SALT_MAGIC, derive_key_iv
    from cryptography.hazmat.primitives import padding
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

    key, iv = derive_key_iv(secret.encode("utf-8"), salt, digest=digest)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return SALT_MAGIC + salt + encryptor.update(padded) + encryptor.finalize()


SECRET = "s3cret-token"
KEY_JSON = b'{"type": "service_account", "client_email": "sa@example.iam"}'


@pytest.fixture
def encrypted_key(tmp_path: Path) -> Path:
    p = tmp_path / "build-system" / "sa-travis-key.json.enc"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(openssl_encrypt(KEY_JSON, SECRET))
    return p


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def key_json() -> bytes:
    return KEY_JSON


@pytest.fixture
def encrypt() -> Callable[..., bytes]:
    return openssl_encrypt


@pytest.fixture
def storage_target():
    from amp_pr_check.storage import StorageTarget

    return StorageTarget(
        bucket="gs://amp-travis-builds",
        key_file=Path("sa-travis-key.json"),
        encrypted_key_file=Path("build-system/sa-travis-key.json.enc"),
        project_id="amp-travis-build-storage",
        service_account="sa-travis@amp-travis-build-storage.iam.gserviceaccount.com",
    )
