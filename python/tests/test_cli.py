import httpx
import pytest
from datalake import __version__, cli
from datalake.config import ClientConfig
from datalake.errors import FILE_NOT_FOUND, FILES_NOT_FOUND
from rich.console import Console


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def backend(monkeypatch, make_config):
    """Route the CLI's configuration to a MockTransport answered by `handler`."""

    def _install(handler):
        config, recorder = make_config(handler)
        monkeypatch.setattr(ClientConfig, "from_env", classmethod(lambda cls: config))
        return recorder

    return _install


def test_version(capsys) -> None:
    assert cli.main(["--version"]) == 0
    assert f"datalake {__version__}" in capsys.readouterr().out


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_upload_subcommand_version_does_not_clash() -> None:
    args = cli.build_parser().parse_args([
        "upload", "report.csv",
        "--customer-id", "7", "--customer-name", "Acme",
        "--dataset-key-id", "3", "--dataset-key-name", "sales",
        "--version", "2", "--level", "CLEAN", "--meta", "source=erp",
    ])

    assert args.version == 2
    assert args.show_version is False
    assert args.level == "clean"
    assert args.meta == ["source=erp"]


def test_upload(backend, tmp_path, capsys) -> None:
    recorder = backend(lambda request: httpx.Response(200, json={"id": 55, "fileUrl": "http://cdn/report.csv"}))
    source = tmp_path / "report.csv"
    source.write_bytes(b"id,amount\n1,10\n")

    code = cli.main([
        "upload", str(source),
        "--customer-id", "7", "--customer-name", "Acme",
        "--dataset-key-id", "3", "--dataset-key-name", "sales",
        "--level", "clean", "--meta", "source=erp",
    ])

    assert code == 0
    body = recorder.last.content.decode()
    assert 'name="dataLakeFileLevel"\r\n\r\nCLEAN' in body
    assert 'name="metadata.source"\r\n\r\nerp' in body
    out = capsys.readouterr().out
    assert "Uploaded" in out
    assert "55" in out


def test_upload_invalid_customer(backend, tmp_path, capsys) -> None:
    recorder = backend(lambda request: httpx.Response(200, json={}))
    source = tmp_path / "report.csv"
    source.write_bytes(b"x")

    code = cli.main([
        "upload", str(source),
        "--customer-id", "0", "--customer-name", "Acme",
        "--dataset-key-id", "3", "--dataset-key-name", "sales",
    ])

    assert code == 1
    assert recorder.requests == []
    assert "Failed to upload file" in capsys.readouterr().out


def test_files_pages_are_one_based(backend, capsys) -> None:
    recorder = backend(lambda request: httpx.Response(200, json={
        "content": [{"id": 1, "fileName": "report.csv", "sizeInBytes": 1536, "dataLakeFileLevel": "RAW"}],
        "totalElements": 11,
        "totalPages": 2,
        "number": 1,
        "size": 10,
    }))

    code = cli.main(["files", "--page", "2", "--level", "raw"])

    assert code == 0
    assert recorder.last.url.params["page"] == "1"
    assert recorder.last.url.params["dataLakeFileLevel"] == "RAW"
    out = capsys.readouterr().out
    assert "report.csv" in out
    assert "1.5 KB" in out


def test_files_not_found(backend, capsys) -> None:
    backend(lambda request: httpx.Response(404, json={"message": "No file found with filters"}))

    assert cli.main(["files"]) == 1
    assert FILES_NOT_FOUND in capsys.readouterr().out


def test_download_not_found(backend, tmp_path, capsys) -> None:
    backend(lambda request: httpx.Response(404, json={"message": "File not found"}))

    assert cli.main(["download", "42", "--output", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert FILE_NOT_FOUND in out
    assert FILES_NOT_FOUND not in out


def test_invalid_timeout_env_exits_cleanly(monkeypatch, capsys) -> None:
    monkeypatch.setenv("DATALAKE_TIMEOUT", "ten")

    assert cli.main(["customers", "list"]) == 1
    assert "DATALAKE_TIMEOUT must be a number" in capsys.readouterr().out


def test_download(backend, tmp_path, capsys) -> None:
    backend(lambda request: httpx.Response(
        200, content=b"abc", headers={"Content-Disposition": 'attachment; filename="report.csv"'},
    ))

    assert cli.main(["download", "42", "--output", str(tmp_path)]) == 0
    assert (tmp_path / "report.csv").read_bytes() == b"abc"


def test_customers_create(backend, capsys) -> None:
    recorder = backend(lambda request: httpx.Response(201, json={"id": 9, "name": "Initech"}))

    assert cli.main(["customers", "create", "Initech", "--email", "it@initech.test"]) == 0
    assert recorder.last_json() == {"name": "Initech", "email": "it@initech.test"}
    assert "Created" in capsys.readouterr().out


def test_dataset_keys_empty(backend, capsys) -> None:
    recorder = backend(lambda request: httpx.Response(200, json=[{"id": 4, "name": "stock", "customerId": 7}]))

    code = cli.main([
        "dataset-keys", "empty", "--customer-id", "7", "--level", "raw", "--month", "3", "--year", "2024",
    ])

    assert code == 0
    assert recorder.last.url.path == "/api/v1/dataset-keys/empty"
    assert "stock" in capsys.readouterr().out


def test_backend_url_flag(backend) -> None:
    recorder = backend(lambda request: httpx.Response(204))

    assert cli.main(["--backend-url", "http://other:8087/", "customers", "delete", "7"]) == 0
    assert str(recorder.last.url) == "http://other:8087/api/v1/customers/7"
