"""
Integration Tests for Crypter.

Tests configuration sources, the command line front end and concurrent use
of a shared cipher.
"""

import io
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from crypter import Cipher, CipherOptions, load_secret, options_from_env
from crypter.cli import main
from crypter.config import DEFAULT_PBKDF2_ITERATIONS, secret_from_env
from crypter.errors import ConfigurationError


FAST_ITERATIONS = "1000"


class TestEnvironmentConfig:
    """Test options and secrets loaded from the environment."""

    def test_defaults(self):
        """Test that an empty environment yields default options."""
        options = options_from_env({})

        assert options == CipherOptions()
        assert options.encoding == "hex"
        assert options.salt_length == 64
        assert options.pbkdf2_iterations == DEFAULT_PBKDF2_ITERATIONS

    def test_overrides(self):
        """Test that every variable is honored."""
        options = options_from_env({
            "CRYPTER_ENCODING": "Base64",
            "CRYPTER_SALT_LENGTH": " 32 ",
            "CRYPTER_PBKDF2_ITERATIONS": "200000",
        })

        assert options.encoding == "base64"
        assert options.salt_length == 32
        assert options.pbkdf2_iterations == 200000

    @pytest.mark.parametrize("name,value", [
        ("CRYPTER_SALT_LENGTH", "sixty-four"),
        ("CRYPTER_SALT_LENGTH", "0"),
        ("CRYPTER_PBKDF2_ITERATIONS", "1e5"),
        ("CRYPTER_ENCODING", "morse"),
    ])
    def test_invalid_values(self, name, value):
        """Test that malformed variables raise configuration errors."""
        with pytest.raises(ConfigurationError):
            options_from_env({name: value})

    def test_low_iterations_warning(self, caplog):
        """Test that a weak iteration count is accepted but logged."""
        with caplog.at_level(logging.WARNING, logger="crypter.config"):
            cipher = Cipher.from_env({"CRYPTER_SECRET": "s3cr3t", "CRYPTER_PBKDF2_ITERATIONS": "10"})

        assert cipher.pbkdf2_iterations == 10
        assert "below the recommended minimum" in caplog.text

    def test_low_iterations_warning_once(self, caplog):
        """Test that overriding weak options still logs a single warning."""
        with caplog.at_level(logging.WARNING, logger="crypter.config"):
            options = CipherOptions(pbkdf2_iterations=10)
            Cipher("s3cr3t", options, salt_length=16)

        warnings = [r for r in caplog.records if "below the recommended minimum" in r.getMessage()]
        assert len(warnings) == 1

    def test_undecodable_secret_variable(self):
        """Test that surrogate-escaped environment bytes are restored."""
        assert secret_from_env({"CRYPTER_SECRET": "pass\udcffword"}) == b"pass\xffword"

    def test_cipher_from_env(self):
        """Test building a cipher entirely from the environment."""
        environ = {
            "CRYPTER_SECRET": "s3cr3t",
            "CRYPTER_ENCODING": "base64url",
            "CRYPTER_PBKDF2_ITERATIONS": FAST_ITERATIONS,
        }

        cipher = Cipher.from_env(environ)
        twin = Cipher("s3cr3t", encoding="base64url", pbkdf2_iterations=1000)

        assert cipher.encoding == "base64url"
        assert twin.decrypt(cipher.encrypt("env")) == "env"

    def test_secret_file_fallback(self, tmp_path):
        """Test CRYPTER_SECRET_FILE is used when CRYPTER_SECRET is unset."""
        secret_file = tmp_path / "secret"
        secret_file.write_bytes(b"from-file\n")

        assert secret_from_env({"CRYPTER_SECRET_FILE": str(secret_file)}) == b"from-file"

    def test_missing_secret(self):
        """Test that no configured secret is an error."""
        with pytest.raises(ConfigurationError):
            secret_from_env({})


class TestSecretFile:
    """Test loading secrets from disk."""

    @pytest.mark.parametrize("content,expected", [
        (b"s3cr3t", b"s3cr3t"),
        (b"s3cr3t\n", b"s3cr3t"),
        (b"s3cr3t\r\n", b"s3cr3t"),
        (b"s3cr3t\n\n", b"s3cr3t\n"),
        (b"  spaced  ", b"  spaced  "),
    ])
    def test_trailing_newline(self, tmp_path, content, expected):
        """Test that exactly one trailing newline is removed."""
        path = tmp_path / "secret"
        path.write_bytes(content)

        assert load_secret(str(path)) == expected

    def test_missing_file(self, tmp_path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_secret(str(tmp_path / "nope"))

    def test_empty_file(self, tmp_path):
        """Test that an empty secret file is rejected."""
        path = tmp_path / "secret"
        path.write_bytes(b"\n")

        with pytest.raises(ConfigurationError):
            load_secret(str(path))


class TestCommandLine:
    """Test the crypter console script."""

    @pytest.fixture(autouse=True)
    def environment(self, monkeypatch):
        monkeypatch.setenv("CRYPTER_SECRET", "s3cr3t")
        monkeypatch.setenv("CRYPTER_PBKDF2_ITERATIONS", FAST_ITERATIONS)
        monkeypatch.delenv("CRYPTER_SECRET_FILE", raising=False)
        monkeypatch.delenv("CRYPTER_ENCODING", raising=False)
        monkeypatch.delenv("CRYPTER_SALT_LENGTH", raising=False)

    def test_encrypt_then_decrypt(self, capsys):
        """Test a round trip through the command line."""
        assert main(["encrypt", "hello"]) == 0
        envelope = capsys.readouterr().out.strip()

        assert main(["decrypt", envelope]) == 0
        assert capsys.readouterr().out == "hello\n"

    def test_stdin(self, monkeypatch, capsys):
        """Test reading the value from standard input."""
        monkeypatch.setattr("sys.stdin", io.StringIO("piped value\n"))
        assert main(["encrypt", "-"]) == 0
        envelope = capsys.readouterr().out.strip()

        monkeypatch.setattr("sys.stdin", io.StringIO(envelope + "\n"))
        assert main(["decrypt"]) == 0
        assert capsys.readouterr().out == "piped value\n"

    def test_option_flags(self, capsys):
        """Test that flags override the environment."""
        assert main(["--encoding", "base64", "--salt-length", "16", "encrypt", "flags"]) == 0
        envelope = capsys.readouterr().out.strip()

        cipher = Cipher("s3cr3t", encoding="base64", salt_length=16, pbkdf2_iterations=1000)
        assert cipher.decrypt(envelope) == "flags"

    def test_secret_file_flag(self, tmp_path, capsys):
        """Test --secret-file takes precedence over CRYPTER_SECRET."""
        path = tmp_path / "secret"
        path.write_text("file-secret\n")

        assert main(["--secret-file", str(path), "encrypt", "value"]) == 0
        envelope = capsys.readouterr().out.strip()

        cipher = Cipher("file-secret", pbkdf2_iterations=1000)
        assert cipher.decrypt(envelope) == "value"

    def test_wrong_secret(self, monkeypatch, capsys):
        """Test that authentication failures exit with status 1."""
        assert main(["encrypt", "hello"]) == 0
        envelope = capsys.readouterr().out.strip()

        monkeypatch.setenv("CRYPTER_SECRET", "other")
        assert main(["decrypt", envelope]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "crypter: error:" in captured.err

    def test_malformed_envelope(self, capsys):
        """Test that undecodable input exits with status 1."""
        assert main(["decrypt", "zz"]) == 1
        assert "not valid hex" in capsys.readouterr().err

    def test_missing_secret(self, monkeypatch, capsys):
        """Test that running without a secret exits with status 1."""
        monkeypatch.delenv("CRYPTER_SECRET")

        assert main(["encrypt", "hello"]) == 1
        assert "No secret configured" in capsys.readouterr().err

    def test_undecodable_argument(self, capsys):
        """Test that an argument with no UTF-8 form exits with status 1."""
        assert main(["encrypt", "\udcff"]) == 1
        assert "not encodable as UTF-8" in capsys.readouterr().err

    def test_undecodable_stdin(self, monkeypatch, capsys):
        """Test that undecodable standard input exits with status 1."""
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"\xff\xfe\n"), encoding="utf-8"))

        assert main(["encrypt"]) == 1
        assert "could not be decoded" in capsys.readouterr().err

    def test_usage_error(self):
        """Test that a missing subcommand is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2


class TestConcurrency:
    """Test sharing one cipher across threads."""

    def test_parallel_roundtrips(self):
        """Test concurrent encrypt/decrypt on a shared instance."""
        cipher = Cipher("s3cr3t", pbkdf2_iterations=1000)
        values = [f"message {i}" for i in range(32)]

        def roundtrip(value):
            return cipher.decrypt(cipher.encrypt(value))

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(roundtrip, values))

        assert results == values
