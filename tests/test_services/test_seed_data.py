"""
Tests for the development seed script
"""

import sys
from datetime import date
from unittest.mock import patch

import pytest

from models import Doctor, Patient, Appointment, Prescription, MedicationAdherence
from scripts.seed_data import main, seed_all
from services.adherence_service import AdherenceService


TODAY = date(2025, 3, 10)


class TestSeedAll:

    @pytest.mark.database
    def test_seeds_demo_practice(self, db_session):
        doctor = seed_all(db=db_session, today=TODAY)

        assert db_session.query(Doctor).count() == 1
        assert db_session.query(Patient).count() == 3
        assert db_session.query(Appointment).filter(Appointment.doctor_id == doctor.id).count() == 6
        assert db_session.query(Prescription).count() == 1
        assert db_session.query(MedicationAdherence).count() == 14 * 2 * 2

    @pytest.mark.database
    def test_rerun_adds_nothing(self, db_session):
        seed_all(db=db_session, today=TODAY)
        seed_all(db=db_session, today=TODAY)

        assert db_session.query(Doctor).count() == 1
        assert db_session.query(Patient).count() == 3
        assert db_session.query(MedicationAdherence).count() == 56

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_seeded_prescription_summary(self, db_session):
        seed_all(db=db_session, today=TODAY)
        prescription = db_session.query(Prescription).first()

        summary = await AdherenceService().get_prescription_summary(prescription.id, db=db_session)

        assert summary["total_doses"] == 56
        assert summary["taken"] + summary["skipped"] + summary["pending"] == 56
        assert len(summary["daily_breakdown"]) == 14
        assert [m["medicine_name"] for m in summary["medicine_breakdown"]] == [
            "Triphala Churna", "Ashwagandha Churna"
        ]


class TestMain:

    @pytest.mark.unit
    @pytest.mark.parametrize("argv,resets", [
        (["seed_data.py"], False),
        (["seed_data.py", "--reset"], True),
    ])
    def test_reset_flag(self, monkeypatch, argv, resets):
        monkeypatch.setattr(sys, "argv", argv)
        with patch("scripts.seed_data.reset_db") as reset_db, \
                patch("scripts.seed_data.create_tables") as create_tables, \
                patch("scripts.seed_data.seed_all") as seed, \
                patch("scripts.seed_data.DatabaseHealthCheck.get_table_counts", return_value={}):
            main()

        assert reset_db.called is resets
        assert create_tables.called is not resets
        seed.assert_called_once_with()
