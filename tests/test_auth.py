"""Tests for russh.domain.auth - private keys on disk and credential fallback."""

import paramiko
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from russh.core.exceptions import ErrorKind, SSHError
from russh.domain.auth import AuthMethods, PasswordAuth, PrivateKeyAuth
from russh.domain.session import SSHClient


PASSPHRASE = "correct horse"


def _openssh_key(path, key, passphrase=None):
    """Write ``key`` in the OpenSSH private-key format; return the public base64."""
    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase.encode())
    else:
        encryption = serialization.NoEncryption()
    path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.OpenSSH, encryption,
    ))
    public = key.public_key().public_bytes(
        serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH,
    )
    return public.split()[1].decode()


def _pem_key(path, key, passphrase=None):
    """Write a paramiko key in the traditional PEM format; return the public base64."""
    key.write_private_key_file(str(path), password=passphrase)
    return key.get_base64()


KEY_WRITERS = {
    "ed25519-openssh": (paramiko.Ed25519Key, lambda p, pw: _openssh_key(p, ed25519.Ed25519PrivateKey.generate(), pw)),
    "ecdsa-openssh": (paramiko.ECDSAKey, lambda p, pw: _openssh_key(p, ec.generate_private_key(ec.SECP256R1()), pw)),
    "rsa-openssh": (paramiko.RSAKey, lambda p, pw: _openssh_key(p, rsa.generate_private_key(65537, 2048), pw)),
    "ecdsa-pem": (paramiko.ECDSAKey, lambda p, pw: _pem_key(p, paramiko.ECDSAKey.generate(), pw)),
    "rsa-pem": (paramiko.RSAKey, lambda p, pw: _pem_key(p, paramiko.RSAKey.generate(2048), pw)),
}


@pytest.fixture(params=sorted(KEY_WRITERS))
def key_kind(request):
    return request.param


# ---------------------------------------------------------------------------
# PrivateKeyAuth.load_key()
# ---------------------------------------------------------------------------


class TestLoadKey:
    def test_unencrypted(self, tmp_path, key_kind):
        key_class, write = KEY_WRITERS[key_kind]
        public = write(tmp_path / "id", None)
        key = PrivateKeyAuth(str(tmp_path / "id")).load_key()
        assert isinstance(key, key_class)
        assert key.get_base64() == public

    def test_passphrase(self, tmp_path, key_kind):
        key_class, write = KEY_WRITERS[key_kind]
        public = write(tmp_path / "id", PASSPHRASE)
        key = PrivateKeyAuth(str(tmp_path / "id"), PASSPHRASE).load_key()
        assert isinstance(key, key_class)
        assert key.get_base64() == public

    def test_missing_passphrase(self, tmp_path, key_kind):
        _, write = KEY_WRITERS[key_kind]
        write(tmp_path / "id", PASSPHRASE)
        with pytest.raises(paramiko.PasswordRequiredException):
            PrivateKeyAuth(str(tmp_path / "id")).load_key()

    def test_home_is_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        _, write = KEY_WRITERS["ecdsa-pem"]
        write(tmp_path / "id_ecdsa", None)
        assert isinstance(PrivateKeyAuth("~/id_ecdsa").load_key(), paramiko.ECDSAKey)

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "id"
        path.write_text("this is not a private key\n")
        with pytest.raises(paramiko.SSHException, match="Unsupported or invalid private key"):
            PrivateKeyAuth(str(path)).load_key()


# ---------------------------------------------------------------------------
# Key files through SSHClient.connect()
# ---------------------------------------------------------------------------


class TestConnectWithKeyFile:
    def test_loaded_key_is_offered(self, create_connection, transport_cls, tmp_path):
        _, write = KEY_WRITERS["ed25519-openssh"]
        public = write(tmp_path / "id", PASSPHRASE)
        SSHClient().connect("example.com", "alice", AuthMethods(private_key=PrivateKeyAuth(str(tmp_path / "id"), PASSPHRASE)))

        username, key = transport_cls.return_value.auth_publickey.call_args[0]
        assert username == "alice"
        assert key.get_base64() == public

    def test_encrypted_key_without_passphrase_is_session_error(self, create_connection, transport_cls, tmp_path):
        _, write = KEY_WRITERS["rsa-pem"]
        write(tmp_path / "id", PASSPHRASE)
        client = SSHClient()
        with pytest.raises(SSHError) as exc_info:
            client.connect("example.com", "alice", AuthMethods(private_key=PrivateKeyAuth(str(tmp_path / "id"))))
        assert exc_info.value.kind is ErrorKind.SESSION
        assert isinstance(exc_info.value.__cause__, paramiko.PasswordRequiredException)
        transport_cls.return_value.auth_publickey.assert_not_called()
        assert not client.is_connected()

    def test_garbage_key_is_session_error(self, create_connection, transport_cls, tmp_path):
        path = tmp_path / "id"
        path.write_bytes(b"\x00\x01garbage")
        with pytest.raises(SSHError) as exc_info:
            SSHClient().connect("example.com", "alice", AuthMethods(private_key=PrivateKeyAuth(str(path))))
        assert exc_info.value.kind is ErrorKind.SESSION

    def test_partial_key_auth_falls_back_to_password(self, create_connection, transport_cls, tmp_path):
        _, write = KEY_WRITERS["ecdsa-pem"]
        write(tmp_path / "id", None)
        transport = transport_cls.return_value
        transport.is_authenticated.side_effect = [False, True]
        auth = AuthMethods(password=PasswordAuth("secret"), private_key=PrivateKeyAuth(str(tmp_path / "id")))

        client = SSHClient()
        client.connect("example.com", "alice", auth)

        transport.auth_publickey.assert_called_once()
        transport.auth_password.assert_called_once_with("alice", "secret")
        assert client.is_connected()

    def test_partial_auth_only_is_session_error(self, create_connection, transport_cls):
        transport = transport_cls.return_value
        transport.is_authenticated.return_value = False
        with pytest.raises(SSHError, match="partial authentication") as exc_info:
            SSHClient().connect("example.com", "alice", AuthMethods(password=PasswordAuth("secret")))
        assert exc_info.value.kind is ErrorKind.SESSION
        transport.close.assert_called_once()
