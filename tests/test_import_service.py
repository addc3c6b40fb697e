from uuid import uuid4

import pytest

from clinic_queue.core.exceptions import ConstraintViolation, EmptyBatch, NotFound, ReadError, ValidationError
from clinic_queue.models.file_import import FileImport
from clinic_queue.models.processing_log import ProcessingLog
from clinic_queue.schemas.patient import PatientCreate, PatientUpdate
from clinic_queue.services import patient_service
from clinic_queue.services.stores import PatientStore

CSV_CONTENT = (
    "nomComplet,telephone,heureRendezVous,heureEstimee\n"
    "Alice Martin,0611223344,09:00,09:15\n"
    ",0622334455,09:30,\n"
    "Carl Dupont,0633445566,10:00,\n"
    "Dana,,10:30,\n"
)


def _csv(tmp_path, content=CSV_CONTENT, name="patients.csv"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_import_saves_valid_rows_and_audits_the_rest(db, doctor, tmp_path):
    result = patient_service.import_from_file(db, _csv(tmp_path), doctor.doctor_id, "patients.csv")

    assert [p.full_name for p in result.saved] == ["Alice Martin", "Carl Dupont"]
    carl = result.saved[1]
    assert carl.estimated_time == "10:00"
    assert carl.doctor_name == "Dr. House"
    assert carl.source_file_name == "patients.csv"
    assert carl.status == "pending"
    assert carl.notification_sent is False

    file_import = result.file_import
    assert file_import.processing_status == "Success"
    assert file_import.records_extracted_from_file == 4
    assert file_import.records_parsed == 2
    assert file_import.records_inserted_count == 2
    assert file_import.records_failed_to_insert_count == 0

    logs = db.query(ProcessingLog).order_by(ProcessingLog.row_number).all()
    assert [(log.row_number, log.stage) for log in logs] == [(2, "normalize"), (4, "normalize")]


def test_store_failures_are_isolated(db, doctor, tmp_path, monkeypatch):
    original_create = PatientStore.create

    def create(self, data):
        if data["full_name"] == "Carl Dupont":
            raise ConstraintViolation("slot already taken")
        return original_create(self, data)

    monkeypatch.setattr(PatientStore, "create", create)

    result = patient_service.import_from_file(db, _csv(tmp_path), doctor.doctor_id, "patients.csv")

    assert [p.full_name for p in result.saved] == ["Alice Martin"]
    assert result.file_import.processing_status == "Partial"
    assert result.file_import.records_failed_to_insert_count == 1
    persist_logs = db.query(ProcessingLog).filter(ProcessingLog.stage == "persist").all()
    assert [(log.row_number, log.message) for log in persist_logs] == [(3, "slot already taken")]


def test_import_without_valid_rows_fails_with_empty_batch(db, doctor, tmp_path):
    path = _csv(tmp_path, "nom,telephone\n,0611\nBob,\n")

    with pytest.raises(EmptyBatch):
        patient_service.import_from_file(db, path, doctor.doctor_id, "patients.csv")

    file_import = db.query(FileImport).one()
    assert file_import.processing_status == "Failed"
    assert file_import.records_extracted_from_file == 2
    assert PatientStore(db).find(doctor.doctor_id) == []


def test_unreadable_file_propagates_read_error(db, doctor, tmp_path):
    with pytest.raises(ReadError):
        patient_service.import_from_file(db, str(tmp_path / "gone.csv"), doctor.doctor_id, "gone.csv")

    assert db.query(FileImport).one().processing_status == "Failed"


def test_corrupt_spreadsheet_marks_the_import_failed(db, doctor, tmp_path):
    path = tmp_path / "patients.xls"
    path.write_bytes(b"this is not a spreadsheet at all\n" * 20)

    with pytest.raises(ReadError):
        patient_service.import_from_file(db, str(path), doctor.doctor_id, "patients.xls")

    file_import = db.query(FileImport).one()
    assert file_import.processing_status == "Failed"
    assert file_import.error_message


def test_import_for_unknown_doctor(db, tmp_path):
    with pytest.raises(NotFound):
        patient_service.import_from_file(db, _csv(tmp_path), uuid4(), "patients.csv")


def test_create_patient_backfills_times(db, doctor):
    patient = patient_service.create_patient(
        db, PatientCreate(full_name=" Alice ", phone="0611", scheduled_time="09:00"), doctor.doctor_id
    )

    assert patient.full_name == "Alice"
    assert patient.estimated_time == "09:00"
    assert patient.doctor_name == "Dr. House"


def test_create_patient_requires_name_and_phone(db, doctor):
    with pytest.raises(ValidationError):
        patient_service.create_patient(db, PatientCreate(full_name="  ", phone="0611"), doctor.doctor_id)


def test_update_is_scoped_to_the_doctor(db, doctor):
    patient = patient_service.create_patient(db, PatientCreate(full_name="Alice", phone="0611"), doctor.doctor_id)

    updated = patient_service.update_patient(
        db, patient.patient_id, doctor.doctor_id, PatientUpdate(status="delayed", delay_minutes=15)
    )
    assert updated.status == "delayed"
    assert updated.delay_minutes == 15

    with pytest.raises(NotFound):
        patient_service.update_patient(db, patient.patient_id, uuid4(), PatientUpdate(notes="x"))
    with pytest.raises(ValidationError):
        patient_service.update_patient(db, patient.patient_id, doctor.doctor_id, PatientUpdate(phone=" "))


def test_stats_count_each_status(db, doctor):
    for name, status in [("A", "pending"), ("B", "pending"), ("C", "done"), ("D", "in_progress")]:
        patient_service.create_patient(db, PatientCreate(full_name=name, phone="06", status=status), doctor.doctor_id)

    stats = patient_service.patient_stats(db, doctor.doctor_id)

    assert stats == {
        "total": 4,
        "pending": 2,
        "in_progress": 1,
        "delayed": 0,
        "done": 1,
        "notification_sent": 0,
    }


def test_bulk_delay_sms_updates_records_and_doctor_counter(db, doctor, dispatcher):
    for name, phone in [("A", "0611"), ("B", "0622"), ("C", "0633")]:
        patient_service.create_patient(db, PatientCreate(full_name=name, phone=phone), doctor.doctor_id)
    patient_service.create_patient(db, PatientCreate(full_name="D", phone="0644", status="done"), doctor.doctor_id)
    dispatcher.fail_for.add("0622")

    result = patient_service.send_bulk_delay_sms(db, dispatcher, doctor.doctor_id)

    assert (result.sent_count, result.total_candidates) == (2, 3)
    notified = patient_service.list_patients(db, doctor.doctor_id, notification_sent=True)
    assert sorted(p.full_name for p in notified) == ["A", "C"]
    db.refresh(doctor)
    assert doctor.sms_sent_count == 2
