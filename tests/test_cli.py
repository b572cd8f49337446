from pathlib import Path

from click.testing import CliRunner

from easye2ee.cli import cli
from easye2ee.keystore import KeyStore

TEST_BITS = "512"


def test_cli_help() -> None:
    """Test CLI help command."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_cli_keygen_and_unseal(tmp_path: Path) -> None:
    """Generate a key pair, then unseal it with the right and wrong password."""
    keys_dir = tmp_path / "keys"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["keygen", "--bits", TEST_BITS, "--password", "pw", "--out", str(keys_dir)],
    )
    assert result.exit_code == 0, result.output
    assert f"Generated {TEST_BITS}-bit key pair" in result.output

    store = KeyStore(keys_dir)
    assert store.public_key_path.exists()
    assert store.sealed_key_path.exists()

    result = runner.invoke(
        cli, ["unseal", "--key-dir", str(keys_dir), "--password", "pw"]
    )
    assert result.exit_code == 0, result.output
    assert "Private key unsealed" in result.output

    result = runner.invoke(
        cli, ["unseal", "--key-dir", str(keys_dir), "--password", "nope"]
    )
    assert result.exit_code != 0
    assert "wrong password" in result.output


def test_cli_unseal_missing_keys(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli, ["unseal", "--key-dir", str(tmp_path / "none"), "--password", "pw"]
    )
    assert result.exit_code != 0
    assert "Key files not found" in result.output


def test_cli_serve_help() -> None:
    """Test serve command help."""
    runner = CliRunner()
    result = runner.invoke(cli, ["serve", "--help"])
    assert result.exit_code == 0
    assert "Start the key generation host" in result.output


def test_cli_keygen_rejects_small_key(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["keygen", "--bits", "128", "--password", "pw", "--out", str(tmp_path)],
    )
    assert result.exit_code == 2  # noqa: PLR2004
    assert not KeyStore(tmp_path).public_key_path.exists()
