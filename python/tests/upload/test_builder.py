from datetime import datetime, timedelta, timezone

import pytest
from datalake.errors import InvalidInputError
from datalake.types import Customer, DataLakeFileLevel, DatasetKey, LakeFile
from datalake.upload import build_file_properties
from datalake.upload.builder import coerce_version_number, uploaded_month

NOW = datetime(2024, 3, 5, 10, 15, 30, 123000, tzinfo=timezone.utc)


@pytest.fixture
def report() -> LakeFile:
    return LakeFile.from_bytes(b"x" * 500000, name="report.csv", content_type="text/csv")


@pytest.fixture
def customer() -> Customer:
    return Customer(id=7, name="Acme")


@pytest.fixture
def dataset_key() -> DatasetKey:
    return DatasetKey(id=3, name="sales")


def test_build_copies_file_attributes(report, customer, dataset_key) -> None:
    properties = build_file_properties(report, customer, dataset_key, now=NOW)

    assert properties.file_name == "report.csv"
    assert properties.original_file_name == "report.csv"
    assert properties.size_in_bytes == 500000
    assert properties.content_type == "text/csv"
    assert properties.file_extension == ".csv"
    assert properties.customer == customer
    assert properties.dataset_key == dataset_key


def test_build_defaults(report, customer, dataset_key) -> None:
    properties = build_file_properties(report, customer, dataset_key, now=NOW)

    assert properties.file_version.version_number == 1
    assert properties.file_version.id is None
    assert properties.file_version.description == "Version 1 of report.csv"
    assert properties.data_lake_file_level == DataLakeFileLevel.RAW
    assert properties.metadata == {}


def test_build_timestamps_come_from_now(report, customer, dataset_key) -> None:
    properties = build_file_properties(report, customer, dataset_key, now=NOW)

    assert properties.uploaded_at == NOW
    assert properties.file_created_at == NOW
    assert properties.uploaded_month == "MARCH"


def test_build_uses_current_time_by_default(report, customer, dataset_key) -> None:
    before = datetime.now(timezone.utc)
    properties = build_file_properties(report, customer, dataset_key)
    after = datetime.now(timezone.utc)

    assert before <= properties.uploaded_at <= after
    assert properties.uploaded_at.tzinfo is not None


def test_build_content_type_fallback(customer, dataset_key) -> None:
    file = LakeFile.from_bytes(b"\x00\x01", name="blob.bin")

    properties = build_file_properties(file, customer, dataset_key, now=NOW)

    assert properties.content_type == "application/octet-stream"


def test_build_explicit_description_is_kept(report, customer, dataset_key) -> None:
    properties = build_file_properties(
        report, customer, dataset_key, version_number=4, version_description="Q1 restatement", now=NOW,
    )

    assert properties.file_version.version_number == 4
    assert properties.file_version.description == "Q1 restatement"


def test_build_blank_description_is_synthesized(report, customer, dataset_key) -> None:
    properties = build_file_properties(report, customer, dataset_key, version_number=2, version_description="  ", now=NOW)

    assert properties.file_version.description == "Version 2 of report.csv"


def test_build_version_id_is_passed_through(report, customer, dataset_key) -> None:
    properties = build_file_properties(report, customer, dataset_key, version_id=99, now=NOW)

    assert properties.file_version.id == 99


@pytest.mark.parametrize("level", ["clean", "CLEAN", "Clean", DataLakeFileLevel.CLEAN])
def test_build_level_is_case_normalized(report, customer, dataset_key, level) -> None:
    properties = build_file_properties(report, customer, dataset_key, data_lake_file_level=level, now=NOW)

    assert properties.data_lake_file_level == DataLakeFileLevel.CLEAN
    assert properties.data_lake_file_level.value == "clean"


def test_build_unknown_level(report, customer, dataset_key) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(report, customer, dataset_key, data_lake_file_level="gold", now=NOW)


def test_build_accepts_mappings(report) -> None:
    properties = build_file_properties(
        report,
        {"id": 7, "name": "Acme", "pathName": "acme"},
        {"id": 3, "name": "sales", "description": "Monthly sales"},
        now=NOW,
    )

    assert properties.customer.path_name == "acme"
    assert properties.dataset_key.description == "Monthly sales"


def test_build_metadata(report, customer, dataset_key) -> None:
    metadata = {"source": "erp", "rows": 1200, "ratio": 0.5, "validated": True}

    properties = build_file_properties(report, customer, dataset_key, metadata=metadata, now=NOW)

    assert properties.metadata == metadata
    assert properties.metadata["validated"] is True


def test_build_rejects_non_scalar_metadata(report, customer, dataset_key) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(report, customer, dataset_key, metadata={"nested": {"a": 1}}, now=NOW)


def test_build_missing_file(customer, dataset_key) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(None, customer, dataset_key, now=NOW)


def test_build_file_without_name(customer, dataset_key) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(LakeFile(name="", content=b"abc"), customer, dataset_key, now=NOW)


@pytest.mark.parametrize("customer", [
    None,
    {"name": "Acme"},
    {"id": None, "name": "Acme"},
    {"id": 0, "name": "Acme"},
    {"id": -4, "name": "Acme"},
    {"id": 7, "name": ""},
    {"id": 7},
    "Acme",
])
def test_build_invalid_customer(report, dataset_key, customer) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(report, customer, dataset_key, now=NOW)


@pytest.mark.parametrize("dataset_key", [
    None,
    {"name": "sales"},
    {"id": 0, "name": "sales"},
    {"id": 3, "name": "   "},
])
def test_build_invalid_dataset_key(report, customer, dataset_key) -> None:
    with pytest.raises(InvalidInputError):
        build_file_properties(report, customer, dataset_key, now=NOW)


def test_build_only_clock_dependent_fields_differ(report, customer, dataset_key) -> None:
    first = build_file_properties(report, customer, dataset_key, version_number=2, now=NOW)
    second = build_file_properties(report, customer, dataset_key, version_number=2, now=NOW + timedelta(days=40))

    clock_fields = {"uploaded_at", "file_created_at", "uploaded_month"}
    assert first.model_dump(exclude=clock_fields) == second.model_dump(exclude=clock_fields)
    assert first.uploaded_month == "MARCH"
    assert second.uploaded_month == "APRIL"


@pytest.mark.parametrize("value,expected", [
    (1, 1),
    (3, 3),
    ("2", 2),
    (2.0, 2),
    (0, 1),
    (-1, 1),
    ("abc", 1),
    ("", 1),
    (None, 1),
    (True, 1),
    (float("nan"), 1),
])
def test_coerce_version_number(value, expected) -> None:
    assert coerce_version_number(value) == expected


@pytest.mark.parametrize("name,expected", [
    ("report.csv", ".csv"),
    ("archive.tar.gz", ".gz"),
    ("README", ""),
    (".env", ".env"),
])
def test_file_extension(name, expected, customer, dataset_key) -> None:
    properties = build_file_properties(LakeFile(name=name, content=b"x"), customer, dataset_key, now=NOW)

    assert properties.file_extension == expected


def test_uploaded_month_reads_aware_instants_in_utc() -> None:
    late_night = datetime(2024, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-3)))

    assert uploaded_month(late_night) == "FEBRUARY"
    assert uploaded_month(datetime(2024, 12, 1)) == "DECEMBER"
