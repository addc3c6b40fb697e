import pandas as pd
import pytest

from clinic_queue.core.exceptions import ReadError, UnsupportedFormat
from clinic_queue.services.file_parser import iter_rows


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_csv_rows_are_keyed_by_header(tmp_path):
    path = _write(tmp_path, "patients.csv", "fullName,phone,scheduledTime\nAlice,0611,09:00\nBob,0622,09:30\n")

    rows = list(iter_rows(path))

    assert rows == [
        {"fullName": "Alice", "phone": "0611", "scheduledTime": "09:00"},
        {"fullName": "Bob", "phone": "0622", "scheduledTime": "09:30"},
    ]


def test_csv_keeps_values_as_text(tmp_path):
    path = _write(tmp_path, "patients.csv", "nom,telephone\nAlice,0611223344\n")
    assert list(iter_rows(path)) == [{"nom": "Alice", "telephone": "0611223344"}]


def test_csv_quoted_values_and_bom(tmp_path):
    path = tmp_path / "patients.csv"
    path.write_bytes('\ufefffullName,phone,notes\nAlice,0611,"late, please call"\n'.encode("utf-8"))

    rows = list(iter_rows(str(path)))

    assert rows == [{"fullName": "Alice", "phone": "0611", "notes": "late, please call"}]


def test_csv_malformed_lines_degrade_gracefully(tmp_path):
    path = _write(
        tmp_path,
        "patients.csv",
        "fullName,phone,scheduledTime\n"
        "Alice,0611,09:00\n"
        "Bob,0622\n"
        "Carl,0633,10:00,unexpected\n",
    )

    rows = list(iter_rows(path))

    assert len(rows) == 3
    assert rows[1] == {"fullName": "Bob", "phone": "0622", "scheduledTime": ""}
    assert rows[2] == {"fullName": "Carl", "phone": "0633", "scheduledTime": "10:00"}


def test_csv_is_lazy(tmp_path):
    path = _write(tmp_path, "patients.csv", "fullName,phone\nAlice,0611\n")
    rows = iter_rows(path)
    assert next(rows) == {"fullName": "Alice", "phone": "0611"}
    with pytest.raises(StopIteration):
        next(rows)


def test_empty_csv_yields_nothing(tmp_path):
    path = _write(tmp_path, "empty.csv", "")
    assert list(iter_rows(path)) == []


def test_excel_reads_first_sheet_only(tmp_path):
    path = str(tmp_path / "patients.xlsx")
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(
            [{"Nom": "Alice", "Téléphone": "0611", "Heure RDV": "09:00"},
             {"Nom": "Bob", "Téléphone": None, "Heure RDV": "09:30"}]
        ).to_excel(writer, sheet_name="Liste", index=False)
        pd.DataFrame([{"Nom": "Other sheet", "Téléphone": "0699"}]).to_excel(writer, sheet_name="Archive", index=False)

    rows = list(iter_rows(path))

    assert rows == [
        {"Nom": "Alice", "Téléphone": "0611", "Heure RDV": "09:00"},
        {"Nom": "Bob", "Téléphone": None, "Heure RDV": "09:30"},
    ]


def test_extension_argument_overrides_path(tmp_path):
    path = _write(tmp_path, "upload.tmp", "fullName,phone\nAlice,0611\n")
    assert list(iter_rows(path, "CSV")) == [{"fullName": "Alice", "phone": "0611"}]


@pytest.mark.parametrize("name", ["patients.pdf", "patients.txt", "patients"])
def test_unsupported_extension_fails_before_reading(name):
    with pytest.raises(UnsupportedFormat):
        iter_rows(f"/does/not/exist/{name}")


@pytest.mark.parametrize("name", ["missing.csv", "missing.xlsx"])
def test_unreadable_file_raises_read_error(tmp_path, name):
    rows = iter_rows(str(tmp_path / name))
    with pytest.raises(ReadError):
        list(rows)


def test_excel_keeps_na_like_text(tmp_path):
    path = str(tmp_path / "patients.xlsx")
    pd.DataFrame(
        [{"fullName": "Alice", "phone": "0611", "notes": "N/A"},
         {"fullName": "NA", "phone": "0622", "notes": None}]
    ).to_excel(path, index=False, engine="openpyxl")

    rows = list(iter_rows(path))

    assert rows == [
        {"fullName": "Alice", "phone": "0611", "notes": "N/A"},
        {"fullName": "NA", "phone": "0622", "notes": None},
    ]


@pytest.mark.parametrize("name", ["corrupt.xls", "corrupt.xlsx"])
def test_corrupt_spreadsheet_raises_read_error(tmp_path, name):
    path = tmp_path / name
    path.write_bytes(b"this is not a spreadsheet at all\n" * 20)

    with pytest.raises(ReadError):
        list(iter_rows(str(path)))
